"""FastAPI application entry point"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from webui.api import messages, episodes, tabs

app = FastAPI(
    title="StreamWatch Background Service",
    description="Episode inference and source page scanning for the StreamWatch extension",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(messages.router)
app.include_router(episodes.router)
app.include_router(tabs.router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "StreamWatch Background Service API"}


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)

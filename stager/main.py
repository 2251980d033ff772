from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stager.config import LOG_LEVEL
from stager.routers import design, files

app = FastAPI(title="Room Stager API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(design.router, prefix="/api/design", tags=["design"])
app.include_router(files.router, prefix="/api/files", tags=["files"])


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)

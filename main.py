from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.term_counts import router as term_counts_router

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {"status": "ok", "message": "term count audit"}


app.include_router(term_counts_router)

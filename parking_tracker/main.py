from fastapi import FastAPI
from parking_tracker.db import Base, engine
import parking_tracker.models  # noqa: F401 ensure models are imported so tables are known
from parking_tracker.api.routes import router as api_router

# create FastAPI instance
app = FastAPI(title="parking-tracker")
app.include_router(api_router)


@app.on_event("startup")
def on_startup_create_tables():
    # Ensure database tables are created on startup
    Base.metadata.create_all(bind=engine)

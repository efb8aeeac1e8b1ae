"""HTTP API package: FastAPI app (app.py) and its pydantic models (models.py)."""

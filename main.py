import json
import os
from contextlib import asynccontextmanager

import firebase_admin
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from firebase_admin import credentials

load_dotenv()

LOCAL_CREDENTIALS_FILE = os.environ.get("FIREBASE_CREDENTIALS_FILE", "bv-celular-firebase-adminsdk.json")


def init_firebase():
    """
    Initialize the default Firebase app once.

    Priority: FIREBASE_CREDENTIALS_JSON_CONTENT env var (for production)
    Fallback: local service account file (for local development)
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()

    firebase_cred_json_content = os.environ.get('FIREBASE_CREDENTIALS_JSON_CONTENT')

    if firebase_cred_json_content:
        try:
            cred = credentials.Certificate(json.loads(firebase_cred_json_content))
            print("Initialized Firebase from FIREBASE_CREDENTIALS_JSON_CONTENT env var.")
        except json.JSONDecodeError as e:
            print(f"CRITICAL ERROR: FIREBASE_CREDENTIALS_JSON_CONTENT is set but contains invalid JSON: {e}")
            print("The application will now exit.")
            raise
        except Exception as e:
            print(f"CRITICAL ERROR: Failed to initialize Firebase from FIREBASE_CREDENTIALS_JSON_CONTENT: {e}")
            print("The application will now exit.")
            raise
    else:
        try:
            cred = credentials.Certificate(LOCAL_CREDENTIALS_FILE)
            print(f"Initialized Firebase from local JSON file: {LOCAL_CREDENTIALS_FILE}")
        except FileNotFoundError:
            print(f"CRITICAL ERROR: Local credentials file '{LOCAL_CREDENTIALS_FILE}' not found.")
            print("This file is required for local development if FIREBASE_CREDENTIALS_JSON_CONTENT is not set.")
            print("The application will now exit.")
            raise
        except Exception as e:
            print(f"CRITICAL ERROR: Failed to initialize Firebase from local file '{LOCAL_CREDENTIALS_FILE}': {e}")
            print("The application will now exit.")
            raise

    options = {}
    if os.environ.get('FIREBASE_PROJECT_ID'):
        options['projectId'] = os.environ['FIREBASE_PROJECT_ID']
    return firebase_admin.initialize_app(cred, options or None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_firebase()
    yield


app = FastAPI(title="BV Celular API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.environ.get("CORS_ORIGIN", "*").split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from api.auth.routers import router as auth_router
from api.stores.routers import router as stores_router
from api.products.routers import router as products_router
from api.employees.routers import router as employees_router
from api.notifications.routers import router as notifications_router

app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(stores_router, prefix="/api/stores", tags=["stores"])
app.include_router(products_router, prefix="/api/products", tags=["products"])
app.include_router(employees_router, prefix="/api/employees", tags=["employees"])
app.include_router(notifications_router, prefix="/api/notifications", tags=["notifications"])


@app.get("/")
def read_root():
    """Root endpoint for the API.
    Returns:
        A simple message indicating the API is running.
    """
    return {"message": "BV Celular API"}


if __name__ == "__main__":
    # Set port from environment variable or default to 8000
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))

"""
Write endpoints: `POST /users` and `POST /products`.

Endpoints are plain `def` functions, so FastAPI runs each request on its
worker threadpool and the blocking store calls do not stall the event loop.
"""

from fastapi import APIRouter, Depends, Request

from dualstore.coordinator import DualWriteCoordinator
from dualstore.domain.models import Product, User

router = APIRouter()


def get_coordinator(request: Request) -> DualWriteCoordinator:
    return request.app.state.coordinator


@router.post("/users", summary="Create a user in MongoDB and PostgreSQL")
def create_user(user: User, coordinator: DualWriteCoordinator = Depends(get_coordinator)) -> dict:
    coordinator.write_user(user)
    return {"message": "User created successfully in MongoDB and PostgreSQL!"}


@router.post("/products", summary="Create a product in MongoDB and PostgreSQL")
def create_product(
    product: Product, coordinator: DualWriteCoordinator = Depends(get_coordinator)
) -> dict:
    coordinator.write_product(product)
    return {"message": "Product created successfully in MongoDB and PostgreSQL!"}

# cart_routes.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_cart_service, require_role
from src.models.base import Role, ok
from src.models.learning_model import CourseRefIn
from src.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])
student = require_role(Role.STUDENT)


@router.post("", status_code=status.HTTP_201_CREATED)
def add_to_cart(body: CourseRefIn, user: Dict[str, Any] = Depends(student), svc: CartService = Depends(get_cart_service)):
    return ok("Course added to the cart successfully", svc.add_to_cart(user["_id"], body.courseId))


@router.get("")
def my_cart(user: Dict[str, Any] = Depends(student), svc: CartService = Depends(get_cart_service)):
    return ok("Cart retrieved successfully", svc.list_cart(user["_id"]))


@router.delete("/{course_id}")
def remove_from_cart(course_id: str, user: Dict[str, Any] = Depends(student), svc: CartService = Depends(get_cart_service)):
    svc.remove_from_cart(user["_id"], course_id)
    return ok("Course removed from the cart successfully")

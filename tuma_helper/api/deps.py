# tuma_helper/api/deps.py
from fastapi import Depends

from tuma_helper.db.gateway import Gateway, get_gateway
from tuma_helper.services.booking_manager import BookingManager
from tuma_helper.services.favorites import FavoritesService
from tuma_helper.services.messaging import MessagingService
from tuma_helper.services.payments import PaymentService
from tuma_helper.services.reviews import ReviewService


def get_booking_manager(gateway: Gateway = Depends(get_gateway)) -> BookingManager:
    return BookingManager(gateway)


def get_messaging(gateway: Gateway = Depends(get_gateway)) -> MessagingService:
    return MessagingService(gateway)


def get_review_service(gateway: Gateway = Depends(get_gateway)) -> ReviewService:
    return ReviewService(gateway)


def get_favorites(gateway: Gateway = Depends(get_gateway)) -> FavoritesService:
    return FavoritesService(gateway)


def get_payments(gateway: Gateway = Depends(get_gateway)) -> PaymentService:
    return PaymentService(gateway)

"""
WhatsApp confirmation link composition
"""

import re
from typing import Optional
from urllib.parse import quote

from clubhouse.core.config import settings
from clubhouse.models.table import get_table
from clubhouse.schemas.reservation import ReservationRecord

WHATSAPP_BASE = "https://wa.me/"


def normalize_phone(mobile: Optional[str], default_prefix: Optional[str] = None) -> str:
    """Digits for wa.me: whitespace removed, default country prefix when none given"""
    phone = re.sub(r"\s+", "", mobile or "")
    if not phone:
        return ""
    if not phone.startswith("+"):
        phone = "+" + (default_prefix or settings.DEFAULT_COUNTRY_PREFIX) + phone
    return phone.replace("+", "")


def cancel_url(reservation_id: str, base_url: Optional[str] = None) -> str:
    return f"{(base_url or settings.BASE_URL).rstrip('/')}/?cancel={reservation_id}"


def confirmation_message(reservation: ReservationRecord, base_url: Optional[str] = None) -> str:
    table = get_table(reservation.table_id)
    table_name = table.name if table else f"Mesa {reservation.table_id}"
    return (
        f"*Confirmación de Reserva*\n\n"
        f"Hola {reservation.customer_name},\n\n"
        f"Te confirmamos tu reserva en *{settings.CLUB_NAME}*:\n\n"
        f"📍 Mesa: {table_name}\n"
        f"📅 Fecha: {reservation.date.isoformat()}\n"
        f"⏰ Hora: {reservation.time}h\n\n"
        f"Si necesitas cancelar tu reserva, puedes hacerlo pulsando aquí:\n"
        f"{cancel_url(reservation.id, base_url)}\n\n"
        f"¡Te esperamos! 🎱"
    )


def whatsapp_url(reservation: ReservationRecord, base_url: Optional[str] = None) -> str:
    """Pre-filled message link; without a mobile the user picks the contact"""
    text = quote(confirmation_message(reservation, base_url), safe="")
    return f"{WHATSAPP_BASE}{normalize_phone(reservation.mobile)}?text={text}"

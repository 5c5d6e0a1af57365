"""
Operator panel on Telegram.

Commands list guests, rooms and reservations and trigger writes; every
active reservation is sent with inline buttons for exactly the actions its
current state allows. Buttons are removed before the request is issued so a
double tap cannot submit twice.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from functools import partial
from typing import Any, Callable, Dict, List, Optional, TypeVar

import pydantic
from pydantic import BaseModel, Field, field_validator
from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Message, Update
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes

from pousada.adapters.wire import normalize_token, ROOM_STATUS_FROM_WIRE, ROOM_TYPE_FROM_WIRE
from pousada.exceptions import ChannelError, ValidationError
from pousada.formatting import (
    escape_markdown_v2,
    format_brl,
    format_cpf,
    format_date_br,
    format_percent,
    format_phone,
    parse_date,
)
from pousada.models import (
    Guest,
    KEY_STATUS_LABELS,
    PAYMENT_STATUS_LABELS,
    PaymentMethod,
    RESERVATION_STATUS_LABELS,
    ROOM_STATUS_LABELS,
    ROOM_TYPE_LABELS,
    Reservation,
    ReservationStatus,
    Room,
    RoomStatus,
    RoomType,
)
from pousada.services.dashboard_service import DashboardService, DashboardStats
from pousada.services.error_classifier import VALIDATION_TITLE
from pousada.services.lifecycle import ACTION_LABELS, ReservationAction, available_actions, checkout_blockers
from pousada.services.notification_service import LEVEL_ICONS, Notification, NotificationService

logger = logging.getLogger(__name__)

T = TypeVar("T")

DASHBOARD_KEY = "dashboard"
NOTIFICATIONS_KEY = "notifications"
BUSINESS_NAME_KEY = "business_name"

RESERVATION_PREFIX = "RSV"
DELETE_GUEST_PREFIX = "DELGUEST"
BOOK_PREFIX = "BOOK"
DISMISS = "DISMISS"

RESERVATION_FILTERS = {
    "ativas": ReservationStatus.ACTIVE,
    "finalizadas": ReservationStatus.COMPLETED,
    "canceladas": ReservationStatus.CANCELLED,
}

HELP_TEXT = (
    "/resumo - indicadores e modo de conexão\n"
    "/hospedes - hóspedes ativos e inativos\n"
    "/quartos - quartos e status\n"
    "/reservas [ativas|finalizadas|canceladas]\n"
    "/reconectar - recarregar dados do backend\n"
    "/novo_hospede nome;cpf;telefone\n"
    "/editar_hospede id;nome;cpf;telefone\n"
    "/excluir_hospede id\n"
    "/novo_quarto numero tipo preco\n"
    "/status_quarto numero status\n"
    "/nova_reserva hospedeId quarto checkin checkout [metodo]\n"
    "/checkin id\n"
    "/receita inicio fim"
)


# ------------------------------------
# Command input schemas
# ------------------------------------

class GuestInput(BaseModel):
    full_name: str = Field(min_length=1, description="Nome completo")
    tax_id: str = Field(min_length=1, description="CPF")
    phone: str = Field(default="", description="Telefone")


class GuestUpdateInput(GuestInput):
    guest_id: int


class RoomInput(BaseModel):
    number: int = Field(gt=0)
    room_type: RoomType
    nightly_rate: float = Field(ge=0)

    @field_validator("room_type", mode="before")
    @classmethod
    def parse_room_type(cls, value: Any) -> Any:
        token = normalize_token(value)
        return ROOM_TYPE_FROM_WIRE.get(token, token)

    @field_validator("nightly_rate", mode="before")
    @classmethod
    def parse_decimal_comma(cls, value: Any) -> Any:
        return value.replace(",", ".") if isinstance(value, str) else value


class RoomStatusInput(BaseModel):
    number: int = Field(gt=0)
    status: RoomStatus

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        token = normalize_token(value)
        return ROOM_STATUS_FROM_WIRE.get(token, token)


def _date_field(value: Any) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"data inválida: {value}")
    return parsed


class BookingInput(BaseModel):
    guest_id: int
    room_number: int
    check_in: date
    check_out: date
    payment_method: Optional[PaymentMethod] = None

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> date:
        return _date_field(value)

    @field_validator("payment_method", mode="before")
    @classmethod
    def parse_method(cls, value: Any) -> Any:
        return normalize_token(value) or None


class RevenueInput(BaseModel):
    start: date
    end: date

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> date:
        return _date_field(value)


class ReservationIdInput(BaseModel):
    reservation_id: int


# ------------------------------------
# Rendering
# ------------------------------------

def _bold(text: Any) -> str:
    return f"*{escape_markdown_v2(text)}*"


def render_notifications(notifications: List[Notification]) -> str:
    lines = []
    for n in notifications:
        line = f"{LEVEL_ICONS[n.level]} {_bold(n.title)}"
        if n.description:
            line += f"\n{escape_markdown_v2(n.description)}"
        lines.append(line)
    return "\n\n".join(lines)


def render_demo_banner() -> str:
    return escape_markdown_v2(
        "⚠️ Modo Demonstração: O backend não está conectado. Os dados exibidos são apenas exemplos. "
        "Use /reconectar para tentar novamente."
    )


def render_stats(stats: DashboardStats, business_name: str, demo_mode: bool) -> str:
    lines = [
        f"🏡 {_bold(business_name + ' - Sistema de Gestão')}",
        "",
        f"👥 Total de Hóspedes: {_bold(stats.guests_with_active_reservation)}",
        f"🛏 Quartos Disponíveis: {_bold(f'{stats.available_rooms}/{stats.total_rooms}')}",
        f"📅 Reservas Ativas: {_bold(stats.active_reservations)}",
        f"📈 Taxa de Ocupação: {_bold(format_percent(stats.occupancy_rate))}",
    ]
    if demo_mode:
        lines.extend(["", render_demo_banner()])
    return "\n".join(lines)


def render_guest(guest: Guest, reservation_count: int) -> str:
    return (
        f"🆔 {_bold(guest.id)} {_bold(guest.full_name)}\n"
        f"CPF: {escape_markdown_v2(format_cpf(guest.tax_id))}\n"
        f"Telefone: {escape_markdown_v2(format_phone(guest.phone))}\n"
        f"Reservas: {escape_markdown_v2(reservation_count)}"
    )


def render_room(room: Room) -> str:
    return (
        f"🛏 {_bold(f'Quarto {room.number}')} \\- {escape_markdown_v2(ROOM_TYPE_LABELS[room.room_type])}\n"
        f"Diária: {escape_markdown_v2(format_brl(room.nightly_rate))}\n"
        f"Status: {_bold(ROOM_STATUS_LABELS[room.status])}"
    )


def render_reservation(reservation: Reservation) -> str:
    lines = [
        f"🆔 {_bold(reservation.get_reference_code())} \\- {_bold(RESERVATION_STATUS_LABELS[reservation.reservation_status])}",
        f"👤 {escape_markdown_v2(reservation.guest_name)}",
        f"🛏 Quarto {escape_markdown_v2(reservation.room_number)}",
        f"📅 {escape_markdown_v2(format_date_br(reservation.check_in))} → "
        f"{escape_markdown_v2(format_date_br(reservation.check_out))} "
        f"\\({escape_markdown_v2(reservation.nights)} diária\\(s\\)\\)",
        f"💰 {escape_markdown_v2(format_brl(reservation.total_amount))}",
        f"💳 Pagamento: {escape_markdown_v2(PAYMENT_STATUS_LABELS[reservation.payment_status])}",
        f"🔑 Chave: {escape_markdown_v2(KEY_STATUS_LABELS[reservation.key_status])}",
    ]
    blockers = checkout_blockers(reservation)
    if reservation.is_active() and blockers:
        lines.append(escape_markdown_v2(f"Check-out indisponível: {', '.join(blockers)}"))
    return "\n".join(lines)


def reservation_keyboard(reservation: Reservation) -> Optional[InlineKeyboardMarkup]:
    """One button per available action; None for terminal reservations."""
    actions = available_actions(reservation)
    if not actions or reservation.id is None:
        return None
    buttons = [
        InlineKeyboardButton(ACTION_LABELS[a], callback_data=f"{RESERVATION_PREFIX}:{a.value}:{reservation.id}")
        for a in actions
    ]
    return InlineKeyboardMarkup([buttons[i:i + 2] for i in range(0, len(buttons), 2)])


def render_booking_preview(guest: Optional[Guest], nights: int, amount: float, room_number: int,
                           check_in: date, check_out: date, method: PaymentMethod) -> str:
    guest_label = guest.full_name if guest else "?"
    return (
        f"📝 {_bold('Nova Reserva')}\n"
        f"👤 {escape_markdown_v2(guest_label)}\n"
        f"🛏 Quarto {escape_markdown_v2(room_number)}\n"
        f"📅 {escape_markdown_v2(format_date_br(check_in))} → {escape_markdown_v2(format_date_br(check_out))}\n"
        f"🌙 {escape_markdown_v2(nights)} diária\\(s\\)\n"
        f"💰 Valor estimado: {_bold(format_brl(amount))}\n"
        f"💳 {escape_markdown_v2(method.value)}\n\n"
        f"{escape_markdown_v2('O valor final é confirmado pelo servidor.')}"
    )


def encode_booking_callback(guest_id: int, room_number: int, check_in: date, check_out: date,
                            method: PaymentMethod) -> str:
    data = f"{BOOK_PREFIX}:{guest_id}:{room_number}:{check_in:%Y%m%d}:{check_out:%Y%m%d}:{method.value}"
    if len(data.encode("utf-8")) > 64:
        raise ChannelError("callback_data exceeds Telegram's 64 byte limit")
    return data


def decode_booking_callback(data: str) -> Dict[str, Any]:
    _, guest_id, room_number, check_in, check_out, method = data.split(":")
    return {
        "guest_id": int(guest_id),
        "room_number": int(room_number),
        "check_in": date(int(check_in[:4]), int(check_in[4:6]), int(check_in[6:])),
        "check_out": date(int(check_out[:4]), int(check_out[4:6]), int(check_out[6:])),
        "payment_method": PaymentMethod(method),
    }


# ------------------------------------
# Helpers
# ------------------------------------

def _get_dashboard(context: ContextTypes.DEFAULT_TYPE) -> DashboardService:
    dashboard = context.bot_data.get(DASHBOARD_KEY)
    if dashboard is None:
        logger.error("DashboardService is not initialized")
        raise ChannelError("DashboardService is not configured on this application")
    return dashboard


async def _run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Dashboard calls block on HTTP, so they run in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


def _command_text(update: Update) -> str:
    """Text after the command itself."""
    text = update.message.text or ""
    parts = text.split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""


def _semicolon_args(text: str) -> List[str]:
    return [part.strip() for part in text.split(";")]


async def _reply(message: Message, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None) -> None:
    await message.reply_text(text, parse_mode="MarkdownV2", reply_markup=reply_markup)


async def _flush_notifications(message: Message, context: ContextTypes.DEFAULT_TYPE) -> None:
    notifications = context.bot_data[NOTIFICATIONS_KEY].drain()
    if notifications:
        await _reply(message, render_notifications(notifications))


async def _reply_invalid(message: Message, detail: str) -> None:
    await _reply(message, f"❌ {_bold(VALIDATION_TITLE)}\n{escape_markdown_v2(detail)}")


def _first_error(exc: pydantic.ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(p) for p in first.get("loc", ()))
    return f"{location}: {first.get('msg', '')}" if location else first.get("msg", "")


# ------------------------------------
# Read-only commands
# ------------------------------------

async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    name = context.bot_data.get(BUSINESS_NAME_KEY, "Pousada")
    await _reply(update.message, f"🏡 {_bold(name + ' - Painel do Operador')}\n\n{escape_markdown_v2(HELP_TEXT)}")


async def summary_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    name = context.bot_data.get(BUSINESS_NAME_KEY, "Pousada")
    await _reply(update.message, render_stats(dashboard.stats(), name, dashboard.demo_mode))


async def reconnect_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    await _run_blocking(dashboard.refresh)
    await _flush_notifications(update.message, context)
    if not dashboard.demo_mode:
        await _reply(update.message, f"✅ {_bold('Backend conectado')}")


async def guests_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    active, inactive = dashboard.guests_by_activity()

    if not active and not inactive:
        await _reply(update.message, escape_markdown_v2("Nenhum hóspede cadastrado."))
        return

    for title, guests in (("Ativos", active), ("Inativos", inactive)):
        if not guests:
            continue
        blocks = [render_guest(g, len(dashboard.reservations_for_guest(g))) for g in guests]
        header = f"👥 {_bold(f'{title} ({len(guests)})')}"
        await _reply(update.message, header + "\n\n" + "\n\n".join(blocks))


async def rooms_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    rooms = dashboard.snapshot.rooms
    if not rooms:
        await _reply(update.message, escape_markdown_v2("Nenhum quarto cadastrado."))
        return
    await _reply(update.message, "\n\n".join(render_room(r) for r in rooms))


async def reservations_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    filter_name = _command_text(update).lower() or "ativas"
    status = RESERVATION_FILTERS.get(filter_name)
    if status is None:
        await _reply_invalid(update.message, "Use: /reservas [ativas|finalizadas|canceladas]")
        return

    reservations = dashboard.reservations_by_status()[status]
    if not reservations:
        await _reply(update.message, escape_markdown_v2(f"Nenhuma reserva {filter_name}."))
        return

    for reservation in reservations:
        await _reply(update.message, render_reservation(reservation), reservation_keyboard(reservation))


# ------------------------------------
# Write commands
# ------------------------------------

async def new_guest_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    parts = _semicolon_args(_command_text(update))
    try:
        data = GuestInput(full_name=parts[0], tax_id=parts[1] if len(parts) > 1 else "",
                          phone=parts[2] if len(parts) > 2 else "")
    except pydantic.ValidationError as e:
        await _reply_invalid(update.message, f"Use: /novo_hospede nome;cpf;telefone ({_first_error(e)})")
        return
    await _run_blocking(dashboard.create_guest, data.full_name, data.tax_id, data.phone)
    await _flush_notifications(update.message, context)


async def edit_guest_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    parts = _semicolon_args(_command_text(update))
    try:
        data = GuestUpdateInput(
            guest_id=parts[0],
            full_name=parts[1] if len(parts) > 1 else "",
            tax_id=parts[2] if len(parts) > 2 else "",
            phone=parts[3] if len(parts) > 3 else "",
        )
    except pydantic.ValidationError as e:
        await _reply_invalid(update.message, f"Use: /editar_hospede id;nome;cpf;telefone ({_first_error(e)})")
        return
    await _run_blocking(dashboard.update_guest, data.guest_id, data.full_name, data.tax_id, data.phone)
    await _flush_notifications(update.message, context)


async def delete_guest_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Asks for confirmation; the warning about linked reservations is shown but never blocks."""
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    try:
        guest_id = int(_command_text(update))
    except ValueError:
        await _reply_invalid(update.message, "Use: /excluir_hospede id")
        return

    guest = dashboard.find_guest(guest_id)
    if guest is None:
        await _reply_invalid(update.message, f"Hóspede {guest_id} não encontrado.")
        return

    warning = dashboard.guest_deletion_warning(guest)
    text = f"Tem certeza que deseja deletar o hóspede {_bold(guest.full_name)}?"
    if warning:
        text += f"\n\n⚠️ {escape_markdown_v2(warning)}"
    confirm_label = "Deletar mesmo assim" if warning and "ATIVA" in warning else "Deletar"
    keyboard = InlineKeyboardMarkup([[
        InlineKeyboardButton(confirm_label, callback_data=f"{DELETE_GUEST_PREFIX}:{guest_id}"),
        InlineKeyboardButton("Cancelar", callback_data=DISMISS),
    ]])
    await _reply(update.message, text, keyboard)


async def new_room_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    parts = _command_text(update).split()
    try:
        data = RoomInput(
            number=parts[0] if parts else None,
            room_type=parts[1] if len(parts) > 1 else None,
            nightly_rate=parts[2] if len(parts) > 2 else None,
        )
    except pydantic.ValidationError as e:
        await _reply_invalid(
            update.message,
            f"Use: /novo_quarto numero SINGLE|DOUBLE|SUITE|DELUXE preco ({_first_error(e)})",
        )
        return
    await _run_blocking(dashboard.create_room, data.number, data.room_type, data.nightly_rate)
    await _flush_notifications(update.message, context)


async def room_status_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    parts = _command_text(update).split()
    try:
        data = RoomStatusInput(number=parts[0] if parts else None, status=parts[1] if len(parts) > 1 else None)
    except pydantic.ValidationError as e:
        await _reply_invalid(
            update.message,
            f"Use: /status_quarto numero DISPONIVEL|OCUPADO|MANUTENCAO|LIMPEZA ({_first_error(e)})",
        )
        return
    await _run_blocking(dashboard.update_room_status, data.number, data.status)
    await _flush_notifications(update.message, context)


async def new_reservation_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Validates and prices locally, then asks the operator to confirm."""
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    parts = _command_text(update).split()
    try:
        data = BookingInput(
            guest_id=parts[0] if parts else None,
            room_number=parts[1] if len(parts) > 1 else None,
            check_in=parts[2] if len(parts) > 2 else None,
            check_out=parts[3] if len(parts) > 3 else None,
            payment_method=parts[4] if len(parts) > 4 else None,
        )
    except pydantic.ValidationError as e:
        await _reply_invalid(
            update.message,
            f"Use: /nova_reserva hospedeId quarto dd/mm/aaaa dd/mm/aaaa [metodo] ({_first_error(e)})",
        )
        return

    try:
        request = dashboard.quote_reservation(
            data.guest_id, data.room_number, data.check_in, data.check_out, data.payment_method
        )
    except ValidationError as e:
        await _reply_invalid(update.message, str(e))
        return

    keyboard = InlineKeyboardMarkup([[
        InlineKeyboardButton("Criar Reserva", callback_data=encode_booking_callback(
            request.guest_id, request.room_number, request.check_in, request.check_out, request.payment_method
        )),
        InlineKeyboardButton("Cancelar", callback_data=DISMISS),
    ]])
    preview = render_booking_preview(
        dashboard.find_guest(request.guest_id),
        request.nights,
        request.preview_amount,
        request.room_number,
        request.check_in,
        request.check_out,
        request.payment_method,
    )
    await _reply(update.message, preview, keyboard)


async def check_in_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Check-in is never offered as a button; the backend decides whether it is valid."""
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    try:
        data = ReservationIdInput(reservation_id=_command_text(update))
    except pydantic.ValidationError:
        await _reply_invalid(update.message, "Use: /checkin id")
        return
    await _run_blocking(dashboard.perform, data.reservation_id, ReservationAction.CHECK_IN)
    await _flush_notifications(update.message, context)


async def revenue_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.message:
        return
    dashboard = _get_dashboard(context)
    parts = _command_text(update).split()
    try:
        data = RevenueInput(start=parts[0] if parts else None, end=parts[1] if len(parts) > 1 else None)
    except pydantic.ValidationError:
        await _reply_invalid(update.message, "Por favor, preencha as duas datas: /receita dd/mm/aaaa dd/mm/aaaa")
        return

    value = await _run_blocking(dashboard.revenue_report, data.start, data.end)
    if value is None:
        await _flush_notifications(update.message, context)
        return
    await _reply(
        update.message,
        f"💰 {_bold('Receita por Período')}\n"
        f"{_bold(format_brl(value))}\n"
        f"De {escape_markdown_v2(format_date_br(data.start))} até {escape_markdown_v2(format_date_br(data.end))}",
    )


# ------------------------------------
# Buttons
# ------------------------------------

async def handle_callback_query(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Buttons are removed before the request is issued. When the action does not
    go through they are put back: the reservation's currently allowed actions
    when it is still in the snapshot, the original buttons otherwise.
    """
    query = update.callback_query
    if not query or not query.message:
        return

    await query.answer()
    data = query.data or ""
    dashboard = _get_dashboard(context)
    original_markup = query.message.reply_markup

    # remove the buttons right away
    await query.edit_message_reply_markup(reply_markup=None)

    if data == DISMISS:
        return

    restore: Optional[InlineKeyboardMarkup] = None
    try:
        if data.startswith(f"{RESERVATION_PREFIX}:"):
            _, action, raw_id = data.split(":")
            reservation_id = int(raw_id)
            updated = await _run_blocking(dashboard.perform, reservation_id, ReservationAction(action))
            if updated is None:
                current = dashboard.find_reservation(reservation_id)
                restore = reservation_keyboard(current) if current is not None else original_markup
            else:
                refreshed = dashboard.find_reservation(updated.id) or updated
                await query.edit_message_text(
                    text=render_reservation(refreshed),
                    parse_mode="MarkdownV2",
                    reply_markup=reservation_keyboard(refreshed),
                )
        elif data.startswith(f"{DELETE_GUEST_PREFIX}:"):
            if not await _run_blocking(dashboard.delete_guest, int(data.split(":")[1])):
                restore = original_markup
        elif data.startswith(f"{BOOK_PREFIX}:"):
            created = await _run_blocking(dashboard.create_reservation, **decode_booking_callback(data))
            if created is None:
                restore = original_markup
        else:
            logger.warning(f"Unknown callback data: {data!r}")
            return
    except (ValueError, KeyError) as e:
        logger.error(f"Invalid callback data {data!r}: {e}")
        await _reply(query.message, f"⚠️ {escape_markdown_v2('Ação inválida.')}")
        return

    if restore is not None:
        await query.edit_message_reply_markup(reply_markup=restore)
    await _flush_notifications(query.message, context)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Panel handler error", exc_info=context.error)
    if isinstance(update, Update) and update.effective_message:
        await update.effective_message.reply_text("⚠️ Não foi possível concluir a operação. Tente novamente.")


# ------------------------------------
# Application
# ------------------------------------

def create_operator_panel_app(token: Optional[str], dashboard: DashboardService,
                              notifications: NotificationService,
                              business_name: str = "Pousada") -> Application:
    """
    Builds the panel application with the dashboard and the notification
    buffer it reports to injected into ``bot_data``.
    """
    if not token:
        raise ChannelError("TELEGRAM_BOT_TOKEN is missing")

    application = Application.builder().token(token).build()
    application.bot_data[DASHBOARD_KEY] = dashboard
    application.bot_data[NOTIFICATIONS_KEY] = notifications
    application.bot_data[BUSINESS_NAME_KEY] = business_name

    commands = {
        "start": start_command,
        "ajuda": start_command,
        "resumo": summary_command,
        "reconectar": reconnect_command,
        "hospedes": guests_command,
        "quartos": rooms_command,
        "reservas": reservations_command,
        "novo_hospede": new_guest_command,
        "editar_hospede": edit_guest_command,
        "excluir_hospede": delete_guest_command,
        "novo_quarto": new_room_command,
        "status_quarto": room_status_command,
        "nova_reserva": new_reservation_command,
        "checkin": check_in_command,
        "receita": revenue_command,
    }
    for name, handler in commands.items():
        application.add_handler(CommandHandler(name, handler))
    application.add_handler(CallbackQueryHandler(handle_callback_query))
    application.add_error_handler(error_handler)

    return application


async def run_operator_panel(application: Application) -> None:
    """Runs the panel with long polling until cancelled."""
    logger.info("Operator panel starting...")
    await application.initialize()
    await application.start()
    await application.updater.start_polling(drop_pending_updates=True)

    try:
        await asyncio.Event().wait()
    except (asyncio.CancelledError, KeyboardInterrupt):
        await application.updater.stop()
        await application.stop()
        await application.shutdown()

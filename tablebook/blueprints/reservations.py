from flask import Blueprint, request, g, current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from pydantic import BaseModel, ValidationError
from ..extensions import db
from ..models import Reservation, Restaurant, Table, Meal
from ..http import ok, BadRequest, Conflict, Forbidden, NotFound, ValidationFailed
from ..auth import login_required
from ..utils.time import api_date, api_time, api_iso_z
from ..schemas import CreateReservationRequest, UpdateReservationRequest, ReservationStatusRequest

bp = Blueprint("reservations", __name__)

_CREATE_REQUIRED = ("tableId", "restaurantId", "date", "time")


def _json_body(allow_empty: bool = False) -> dict:
    payload = request.get_json(silent=True)
    if payload is None and allow_empty:
        return {}
    if not isinstance(payload, dict):
        raise BadRequest("Missing or invalid JSON payload.", code="INVALID_PAYLOAD")
    return payload


def _validate(model: type[BaseModel], payload: dict, required: tuple[str, ...] = ()):
    # null and "" count as absent for required fields
    blank = [name for name in required if payload.get(name) in (None, "")]
    if blank:
        raise BadRequest("Missing required fields", details=", ".join(blank), code="MISSING_FIELDS")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        missing = [".".join(str(p) for p in err["loc"]) for err in errors if err["type"] == "missing"]
        if missing:
            raise BadRequest("Missing required fields", details=", ".join(missing), code="MISSING_FIELDS")
        raise ValidationFailed("Invalid input.", details=errors)


def _slot_taken(table_id, date, time, exclude_id=None) -> bool:
    q = select(Reservation.id).where(
        Reservation.table_id == table_id,
        Reservation.date == date,
        Reservation.time == time,
        Reservation.status == "reserved",
    )
    if exclude_id is not None:
        q = q.where(Reservation.id != exclude_id)
    return db.session.execute(q.limit(1)).first() is not None


def _commit_slot(message: str, table_id: int):
    """Commits, turning a lost race on the active-slot index into a Conflict."""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("slot race lost on table %s", table_id)
        raise Conflict(message)


def _user_summary(user):
    return {"id": user.id, "name": user.name, "email": user.email} if user else None

def _restaurant_summary(restaurant):
    return {"id": restaurant.id, "name": restaurant.name, "address": restaurant.address} if restaurant else None

def _table_summary(table):
    return {"id": table.id, "tableNumber": table.table_number, "capacity": table.capacity} if table else None

def _meal_summary(meal):
    return {"id": meal.id, "name": meal.name, "price": str(meal.price)} if meal else None

_SUMMARIES = {
    "user": _user_summary,
    "restaurant": _restaurant_summary,
    "table": _table_summary,
    "meal": _meal_summary,
}


def _reservation_json(reservation: Reservation, *expand: str) -> dict:
    data = {
        "id": reservation.id,
        "userId": reservation.user_id,
        "tableId": reservation.table_id,
        "mealId": reservation.meal_id,
        "restaurantId": reservation.restaurant_id,
        "date": api_date(reservation.date),
        "time": api_time(reservation.time),
        "status": reservation.status,
        "createdAt": api_iso_z(reservation.created_at),
        "updatedAt": api_iso_z(reservation.updated_at),
    }
    for name in expand:
        data[name] = _SUMMARIES[name](getattr(reservation, name))
    return data


def _find_reservations(*criteria, expand: tuple[str, ...] = ()) -> list[Reservation]:
    q = (
        select(Reservation)
        .where(*criteria)
        .options(*(joinedload(getattr(Reservation, name)) for name in expand))
        .order_by(Reservation.date.asc(), Reservation.time.asc(), Reservation.id.asc())
    )
    return list(db.session.execute(q).scalars())


def _get_reservation(reservation_id: int, details: str | None = None) -> Reservation:
    reservation = db.session.get(Reservation, reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found", details=details)
    return reservation


@bp.post("/create")
@login_required
def create_reservation():
    data = _validate(CreateReservationRequest, _json_body(), required=_CREATE_REQUIRED)

    restaurant = db.session.get(Restaurant, data.restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")

    table = db.session.execute(
        select(Table).filter_by(id=data.table_id, restaurant_id=data.restaurant_id)
    ).scalar_one_or_none()
    if table is None:
        raise NotFound("Table not found or does not belong to this restaurant")

    if _slot_taken(data.table_id, data.date, data.time):
        current_app.logger.warning(
            "refused booking of table %s on %s %s: slot taken", data.table_id, data.date, api_time(data.time)
        )
        raise Conflict("Table is already reserved for this time slot")

    if data.meal_id is not None:
        meal = db.session.execute(
            select(Meal).filter_by(id=data.meal_id, restaurant_id=data.restaurant_id)
        ).scalar_one_or_none()
        if meal is None:
            raise NotFound("Meal not found or does not belong to this restaurant")

    res = Reservation(
        user_id=g.user_id,
        table_id=data.table_id,
        meal_id=data.meal_id,
        restaurant_id=data.restaurant_id,
        date=data.date,
        time=data.time,
        status="reserved",
    )
    db.session.add(res)
    _commit_slot("Table is already reserved for this time slot", data.table_id)

    current_app.logger.info("reservation %s created by user %s", res.id, g.user_id)
    return ok("Reservation created successfully", 201, reservation=_reservation_json(res))


@bp.put("/update/<int:reservation_id>")
@login_required
def update_reservation(reservation_id: int):
    reservation = _get_reservation(reservation_id)
    if reservation.user_id != g.user_id:
        raise Forbidden("Unauthorized", details="You do not own this reservation")

    data = _validate(UpdateReservationRequest, _json_body(allow_empty=True))
    changes = {name: getattr(data, name) for name in data.model_fields_set}

    if "date" in changes or "time" in changes:
        date = changes.get("date", reservation.date)
        time = changes.get("time", reservation.time)
        if _slot_taken(reservation.table_id, date, time, exclude_id=reservation.id):
            current_app.logger.warning(
                "refused move of reservation %s to %s %s: slot taken", reservation.id, date, api_time(time)
            )
            raise Conflict("Table is already reserved for the selected time")

    for name, value in changes.items():
        setattr(reservation, name, value)
    _commit_slot("Table is already reserved for the selected time", reservation.table_id)

    current_app.logger.info("reservation %s updated: %s", reservation.id, ", ".join(sorted(changes)) or "no changes")
    return ok("Reservation updated successfully", reservation=_reservation_json(reservation))


@bp.delete("/delete/<int:reservation_id>")
@login_required
def delete_reservation(reservation_id: int):
    reservation = _get_reservation(reservation_id, details="Invalid reservation ID")
    if reservation.user_id != g.user_id:
        raise Forbidden("Unauthorized", details="You do not own this reservation")

    db.session.delete(reservation)
    db.session.commit()

    current_app.logger.info("reservation %s deleted by user %s", reservation_id, g.user_id)
    return ok("Reservation deleted successfully")


@bp.get("/restaurant/<int:restaurant_id>")
@login_required
def list_restaurant_reservations(restaurant_id: int):
    """
    Owner view of every reservation at a restaurant, earliest first.
    """
    restaurant = db.session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found", details="Invalid restaurant ID")
    if restaurant.owned_by != g.user_id:
        raise Forbidden("Unauthorized", details="You are not the owner of this restaurant")

    expand = ("user", "table", "meal")
    rows = _find_reservations(Reservation.restaurant_id == restaurant_id, expand=expand)
    return ok(
        "All reservations fetched successfully",
        reservations=[_reservation_json(r, *expand) for r in rows],
    )


@bp.patch("/<int:reservation_id>/status")
@login_required
def update_reservation_status(reservation_id: int):
    payload = request.get_json(silent=True)
    try:
        data = ReservationStatusRequest.model_validate(payload if isinstance(payload, dict) else {})
    except ValidationError:
        raise BadRequest(
            "Invalid status value",
            details="Status must be 'canceled' or 'completed'",
            code="INVALID_STATUS",
        )

    reservation = _get_reservation(reservation_id, details="Invalid reservation ID")
    restaurant = reservation.restaurant
    if restaurant is None:
        raise NotFound("Restaurant not found", details="Restaurant associated with this reservation is invalid")
    if restaurant.owned_by != g.user_id:
        raise Forbidden("Unauthorized", details="You are not the owner of this restaurant")

    reservation.status = data.status
    db.session.commit()

    current_app.logger.info("reservation %s marked %s by owner %s", reservation.id, data.status, g.user_id)
    return ok(
        f"Reservation marked as '{data.status}' successfully",
        reservation=_reservation_json(reservation),
    )


@bp.get("/user")
@login_required
def list_user_reservations():
    expand = ("restaurant", "table", "meal")
    rows = _find_reservations(Reservation.user_id == g.user_id, expand=expand)
    return ok(
        "All reservations for the user fetched successfully",
        reservations=[_reservation_json(r, *expand) for r in rows],
    )


@bp.get("/table/<int:table_id>")
@login_required
def list_table_reservations(table_id: int):
    """
    The restaurant owner sees every booking on the table; anyone else
    only their own, and is refused if they hold none.
    """
    table = db.session.get(Table, table_id)
    if table is None:
        raise NotFound("Table not found", details="Invalid table ID")

    is_owner = table.restaurant.owned_by == g.user_id
    criteria = [Reservation.table_id == table_id]
    if not is_owner:
        criteria.append(Reservation.user_id == g.user_id)

    expand = ("user", "restaurant")
    rows = _find_reservations(*criteria, expand=expand)
    if not rows and not is_owner:
        raise Forbidden("Unauthorized", details="You are not authorized to view these reservations")

    return ok(
        "Reservations for the table fetched successfully",
        reservations=[_reservation_json(r, *expand) for r in rows],
    )


@bp.get("/<int:reservation_id>")
@login_required
def get_reservation(reservation_id: int):
    expand = ("user", "restaurant", "table", "meal")
    reservation = db.session.execute(
        select(Reservation)
        .where(Reservation.id == reservation_id)
        .options(*(joinedload(getattr(Reservation, name)) for name in expand))
    ).scalar_one_or_none()
    if reservation is None:
        raise NotFound("Reservation not found")

    owner_id = reservation.restaurant.owned_by if reservation.restaurant else None
    if g.user_id not in (reservation.user_id, owner_id):
        raise Forbidden("Unauthorized", details="You are not authorized to view this reservation")

    return ok("Reservation details fetched successfully", reservation=_reservation_json(reservation, *expand))

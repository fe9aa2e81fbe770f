import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

load_dotenv()

from db.base import Base
from db.deps import get_db
from db.session import engine_rental
from schemas.auth import LoginRequest
from schemas.orders import CreateOrderDto, UpdateOrderDto
from schemas.registry import ClienteUpsert, MaterialeUpsert
from services.admin_auth_service import authenticate_admin, bearer_token, get_token_payload, issue_admin_token
from services.availability_service import get_material_availability
from services.order_service import (
    ClienteNotFoundError,
    MaterialNotFoundError,
    OrderNotFoundError,
    create_orders,
    delete_order,
    list_orders,
    serialize_ordine,
    update_order,
    update_order_status,
)
from services.registry_service import (
    DependentOrdersError,
    RecordNotFoundError,
    create_cliente,
    create_materiale,
    delete_cliente,
    delete_materiale,
    list_clienti,
    list_materiali,
    serialize_cliente,
    serialize_materiale,
    update_cliente,
    update_materiale,
)
from services.report_service import get_material_order_counts, get_monthly_profits


def _parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in str(raw).split(",") if item.strip()]


def _parse_bool_env(name: str, default: str) -> bool:
    return str(os.environ.get(name, default)).strip().lower() in {"1", "true", "yes", "on"}


logging.basicConfig(level=(os.environ.get("LOG_LEVEL") or "INFO").strip().upper())
AUTH_LOGGER = logging.getLogger("rental_admin.auth")
HTTP_LOGGER = logging.getLogger("rental_admin.http")

REQUIRE_AUTH = _parse_bool_env("REQUIRE_AUTH", "false")

app = FastAPI()

_CORS_ALLOW_ORIGINS = _parse_csv_env(
    "CORS_ALLOW_ORIGINS",
    "https://noleggio-cantinota-frontend.onrender.com,http://localhost:5173",
)
_CORS_ALLOW_CREDENTIALS = _parse_bool_env("CORS_ALLOW_CREDENTIALS", "true")
if "*" in _CORS_ALLOW_ORIGINS:
    # Browsers reject wildcard origins with credentials; force safe behavior.
    _CORS_ALLOW_CREDENTIALS = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=_CORS_ALLOW_ORIGINS,
    allow_credentials=_CORS_ALLOW_CREDENTIALS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

if _parse_bool_env("CREATE_SCHEMA", "true"):
    Base.metadata.create_all(bind=engine_rental)


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError):
    HTTP_LOGGER.error("Store error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Errore interno del database."})


def require_admin(authorization: str | None = Header(None)) -> dict | None:
    if not REQUIRE_AUTH:
        return None
    session = get_token_payload(bearer_token(authorization))
    if not session:
        raise HTTPException(status_code=401, detail="Token mancante o non valido.")
    return session


AUTH = [Depends(require_admin)]


def _get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidate = forwarded.split(",")[0].strip()
        if candidate:
            return candidate
    return request.client.host if request.client and request.client.host else "unknown"


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Noleggio backend attivo"


@app.get("/healthz")
def healthcheck():
    return {"status": "ok"}


@app.get("/api/healthz")
def healthcheck_api(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except SQLAlchemyError as exc:
        HTTP_LOGGER.error("Health check failed path=/api/healthz", exc_info=exc)
        raise HTTPException(status_code=503, detail="db_unavailable") from exc


@app.post("/login")
def login(payload: dict, request: Request, db: Session = Depends(get_db)):
    client_ip = _get_client_ip(request)
    try:
        parsed = LoginRequest.model_validate(payload)
    except ValidationError:
        AUTH_LOGGER.warning("Login rejected ip=%s reason=invalid_payload", client_ip)
        raise HTTPException(status_code=400, detail="Richiesta di login non valida.")

    username = str(parsed.username or "").strip()
    admin = authenticate_admin(db, username, parsed.password)
    if not admin:
        AUTH_LOGGER.warning("Login failed ip=%s username=%s", client_ip, username)
        raise HTTPException(status_code=401, detail="Credenziali non valide")

    AUTH_LOGGER.info("Login success ip=%s username=%s admin_id=%s", client_ip, admin.username, admin.id)
    return {"token": issue_admin_token(admin)}


# Customers


@app.get("/clienti", dependencies=AUTH)
def get_clienti(db: Session = Depends(get_db)):
    return [serialize_cliente(cliente) for cliente in list_clienti(db)]


@app.post("/clienti/add", dependencies=AUTH)
def add_cliente(payload: ClienteUpsert, db: Session = Depends(get_db)):
    return serialize_cliente(create_cliente(db, payload))


@app.put("/clienti/{cliente_id}", dependencies=AUTH)
def put_cliente(cliente_id: int, payload: ClienteUpsert, db: Session = Depends(get_db)):
    try:
        cliente = update_cliente(db, cliente_id, payload)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return serialize_cliente(cliente)


@app.delete("/clienti/{cliente_id}", dependencies=AUTH)
def remove_cliente(cliente_id: int, db: Session = Depends(get_db)):
    try:
        delete_cliente(db, cliente_id)
    except DependentOrdersError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"message": "Cliente eliminato"}


# Materials


@app.get("/materiali", dependencies=AUTH)
def get_materiali(db: Session = Depends(get_db)):
    return [serialize_materiale(materiale) for materiale in list_materiali(db)]


@app.post("/materiali", dependencies=AUTH)
def add_materiale(payload: MaterialeUpsert, db: Session = Depends(get_db)):
    return serialize_materiale(create_materiale(db, payload))


@app.get("/materiali/disponibilita", dependencies=AUTH)
def get_disponibilita(db: Session = Depends(get_db)):
    return get_material_availability(db)


@app.put("/materiali/{materiale_id}", dependencies=AUTH)
def put_materiale(materiale_id: int, payload: MaterialeUpsert, db: Session = Depends(get_db)):
    try:
        materiale = update_materiale(db, materiale_id, payload)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return serialize_materiale(materiale)


@app.delete("/materiali/{materiale_id}", dependencies=AUTH)
def remove_materiale(materiale_id: int, db: Session = Depends(get_db)):
    try:
        delete_materiale(db, materiale_id)
    except DependentOrdersError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"message": "Materiale eliminato"}


# Orders


@app.post("/ordini", dependencies=AUTH)
def post_ordini(payload: CreateOrderDto, db: Session = Depends(get_db)):
    try:
        created = create_orders(db, payload)
    except (ClienteNotFoundError, MaterialNotFoundError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if payload.is_multi_line:
        return {"message": "Ordini creati", "ordini": [serialize_ordine(ordine) for ordine in created]}
    return serialize_ordine(created[0])


@app.get("/ordini", dependencies=AUTH)
def get_ordini(db: Session = Depends(get_db)):
    return list_orders(db)


@app.put("/ordini/{order_id}", dependencies=AUTH)
def put_ordine(order_id: int, payload: UpdateOrderDto, db: Session = Depends(get_db)):
    try:
        ordine = update_order(db, order_id, payload)
    except (ClienteNotFoundError, MaterialNotFoundError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OrderNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return serialize_ordine(ordine)


@app.patch("/ordini/{order_id}/stato", dependencies=AUTH)
def patch_ordine_stato(order_id: int, payload: dict, db: Session = Depends(get_db)):
    try:
        ordine = update_order_status(
            db,
            order_id,
            payload.get("consegnato"),
            payload.get("ritirato"),
            payload.get("pagato"),
        )
    except OrderNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return serialize_ordine(ordine)


@app.delete("/ordini/{order_id}", dependencies=AUTH)
def remove_ordine(order_id: int, db: Session = Depends(get_db)):
    delete_order(db, order_id)
    return {"message": "Ordine eliminato"}


# Reports


@app.get("/profitti/mensili", dependencies=AUTH)
def get_profitti_mensili(db: Session = Depends(get_db)):
    return get_monthly_profits(db)


@app.get("/statistiche/materiali", dependencies=AUTH)
def get_statistiche_materiali(db: Session = Depends(get_db)):
    return get_material_order_counts(db)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT") or 3000))

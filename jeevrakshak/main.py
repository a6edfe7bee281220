"""
main.py
========
This is the FastAPI entry point for the Jeevrakshak hospital backend.
It:
 - Initializes the database and seeds demo accounts.
 - Owns the shared request store for the lifetime of the process.
 - Exposes REST endpoints for doctor requests / SOS alerts, patients,
   staff rosters, login and the staff dashboard summary.
 - Pushes "requests changed" events to connected staff dashboards.
"""

import logging
from typing import Callable, List, Optional

import jwt
from fastapi import (
    APIRouter, BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request,
    WebSocket, WebSocketDisconnect, status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import or_

from .auth import (
    ROLE_PATIENT, ROLE_STAFF, Principal, create_token, decode_token, hash_password,
    optional_principal, require_patient, require_staff, verify_password,
)
from .config import Settings
from .db import init_db, make_engine, make_session_factory
from .errors import DuplicateRequestError, InvalidBMIInput, StoreUnavailableError
from .health import calculate_bmi, goal_progress
from .models import Base, DoctorRequest, Patient, RequestType, Staff, normalize_type, utcnow
from .notifications import DashboardHub, send_pushover
from .presentation import SOS_REASON_PLACEHOLDER, present_dashboard
from .request_store import RequestStore
from .resolution import ResolutionResult, resolve
from .roster import build_roster
from .schemas import (
    DashboardSummary, DoctorRequestCreate, DoctorRequestOut, GoalsUpdate, HealthGoals,
    LoginRequest, OxygenRequest, PatientCreate, PatientOut, StaffOut, StaffRoster, TokenResponse,
)
from .seed import DEFAULT_PATIENT_PASSWORD, seed_database
from .triage import triage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# DEPENDENCIES
# ---------------------------------------------------------------------------

def get_db(request: Request):
    """
    Dependency injection generator.
    Yields a database session, closes when done.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_store(request: Request) -> RequestStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_hub(request: Request) -> DashboardHub:
    return request.app.state.hub


# ---------------------------------------------------------------------------
# DOCTOR REQUESTS / SOS
# ---------------------------------------------------------------------------

def _create_request(
    body: DoctorRequestCreate,
    forced_type: Optional[RequestType],
    principal: Optional[Principal],
    db,
    store: RequestStore,
    settings: Settings,
    hub: DashboardHub,
    background_tasks: BackgroundTasks,
) -> DoctorRequestOut:
    patient_name = body.patient_name
    patient_id = None
    if principal is not None and principal.role == ROLE_PATIENT:
        patient_id = principal.id
        if not patient_name:
            patient = db.query(Patient).filter(Patient.patient_id == principal.id).first()
            if not patient:
                raise HTTPException(status_code=404, detail="Patient not found.")
            patient_name = patient.name
    if not patient_name:
        raise HTTPException(status_code=422, detail="patientName is required.")

    created = store.add(DoctorRequest(
        patient_name=patient_name,
        id=body.id,
        reason=body.reason,
        type=forced_type or normalize_type(body.type),
        criticality=body.criticality,
        patient_id=patient_id,
    ))

    if created.type is RequestType.SOS:
        background_tasks.add_task(
            send_pushover,
            settings.pushover_token,
            settings.pushover_user,
            f"SOS: {created.patient_name}",
            created.reason or SOS_REASON_PLACEHOLDER,
        )
    background_tasks.add_task(hub.broadcast, {
        "event": "request_created",
        "id": created.id,
        "type": created.type.value,
    })
    return DoctorRequestOut.from_snapshot(created)


@router.post("/requests", status_code=201, response_model=DoctorRequestOut)
def api_create_request(
    body: DoctorRequestCreate,
    background_tasks: BackgroundTasks,
    principal: Optional[Principal] = Depends(optional_principal),
    db=Depends(get_db),
    store: RequestStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    hub: DashboardHub = Depends(get_hub),
):
    """Create a request; ``type`` in the body decides SOS vs. queued."""
    return _create_request(body, None, principal, db, store, settings, hub, background_tasks)


@router.post("/sos-request", status_code=201, response_model=DoctorRequestOut)
def api_create_sos_request(
    body: DoctorRequestCreate,
    background_tasks: BackgroundTasks,
    principal: Optional[Principal] = Depends(optional_principal),
    db=Depends(get_db),
    store: RequestStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    hub: DashboardHub = Depends(get_hub),
):
    return _create_request(body, RequestType.SOS, principal, db, store, settings, hub, background_tasks)


@router.post("/patients/sos", status_code=201, response_model=DoctorRequestOut)
def api_create_patient_sos(
    body: DoctorRequestCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_patient),
    db=Depends(get_db),
    store: RequestStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    hub: DashboardHub = Depends(get_hub),
):
    """SOS raised from the patient dashboard; the name comes from the patient record."""
    patient = _own_patient(principal, db)
    body = body.model_copy(update={"patient_name": patient.name})
    return _create_request(body, RequestType.SOS, principal, db, store, settings, hub, background_tasks)


@router.post("/doctor-request", status_code=201, response_model=DoctorRequestOut)
def api_create_doctor_request(
    body: DoctorRequestCreate,
    background_tasks: BackgroundTasks,
    principal: Optional[Principal] = Depends(optional_principal),
    db=Depends(get_db),
    store: RequestStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    hub: DashboardHub = Depends(get_hub),
):
    return _create_request(body, RequestType.BOOK_NOW, principal, db, store, settings, hub, background_tasks)


@router.get("/requests", response_model=List[DoctorRequestOut])
@router.get("/doctor-requests", response_model=List[DoctorRequestOut])
@router.get("/patients/requests", response_model=List[DoctorRequestOut])
def api_list_requests(
    _: Principal = Depends(require_staff),
    store: RequestStore = Depends(get_store),
):
    """All pending requests, unordered. Staff dashboards poll this."""
    return [DoctorRequestOut.from_snapshot(r) for r in store.list()]


@router.get("/requests/triage")
def api_triaged_requests(
    request: Request,
    _: Principal = Depends(require_staff),
    store: RequestStore = Depends(get_store),
):
    """SOS alerts and the ranked queue, with ages rendered for display."""
    return present_dashboard(store.list(), now=request.app.state.clock())


def _resolve_or_404(store: RequestStore, hub: DashboardHub, request_id: str, background_tasks: BackgroundTasks):
    if resolve(store, request_id) is ResolutionResult.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Request not found")
    background_tasks.add_task(hub.broadcast, {"event": "request_resolved", "id": request_id})
    return {"message": f"Request {request_id} resolved", "id": request_id,
            "result": ResolutionResult.RESOLVED.value}


@router.delete("/requests/{request_id}")
def api_delete_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    _: Principal = Depends(require_staff),
    store: RequestStore = Depends(get_store),
    hub: DashboardHub = Depends(get_hub),
):
    return _resolve_or_404(store, hub, request_id, background_tasks)


@router.put("/doctor-request/{request_id}/resolve")
def api_resolve_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    _: Principal = Depends(require_staff),
    store: RequestStore = Depends(get_store),
    hub: DashboardHub = Depends(get_hub),
):
    return _resolve_or_404(store, hub, request_id, background_tasks)


# ---------------------------------------------------------------------------
# AUTH
# ---------------------------------------------------------------------------

@router.post("/auth/login", response_model=TokenResponse)
def api_login(body: LoginRequest, db=Depends(get_db), settings: Settings = Depends(get_settings)):
    """Staff log in with their staff id, patients with their name or patient id."""
    if body.role == ROLE_STAFF:
        user = db.query(Staff).filter(Staff.staff_id == body.id).first()
        account_id = user.staff_id if user else None
    else:
        user = db.query(Patient).filter(or_(Patient.name == body.id, Patient.patient_id == body.id)).first()
        account_id = user.patient_id if user else None

    if not user:
        raise HTTPException(status_code=401, detail="User not found.")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    token = create_token(account_id, body.role, settings.jwt_secret, settings.jwt_expires_hours)
    logger.info("%s %s logged in", body.role, account_id)
    return TokenResponse(token=token, role=body.role, id=account_id)


# ---------------------------------------------------------------------------
# PATIENTS
# ---------------------------------------------------------------------------

@router.get("/patients", response_model=List[PatientOut])
def api_list_patients(_: Principal = Depends(require_staff), db=Depends(get_db)):
    return [PatientOut.from_orm_patient(p) for p in db.query(Patient).order_by(Patient.id).all()]


@router.post("/patients", status_code=201, response_model=PatientOut)
def api_admit_patient(body: PatientCreate, _: Principal = Depends(require_staff), db=Depends(get_db)):
    """Admit a new patient. The login password defaults to the demo password."""
    if db.query(Patient).filter(Patient.patient_id == body.patient_id).first():
        raise HTTPException(status_code=400, detail="Patient ID already exists.")
    patient = Patient(
        patient_id=body.patient_id,
        name=body.name,
        password_hash=hash_password(body.password or DEFAULT_PATIENT_PASSWORD),
        ward=body.ward,
        condition=body.condition,
        age=body.age,
    )
    db.add(patient)
    db.commit()
    db.refresh(patient)
    logger.info("Admitted patient %s (%s) to %s", patient.name, patient.patient_id, patient.ward)
    return PatientOut.from_orm_patient(patient)


def _own_patient(principal: Principal, db) -> Patient:
    patient = db.query(Patient).filter(Patient.patient_id == principal.id).first()
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found.")
    return patient


@router.get("/patients/me", response_model=PatientOut)
def api_patient_me(principal: Principal = Depends(require_patient), db=Depends(get_db)):
    return PatientOut.from_orm_patient(_own_patient(principal, db))


@router.get("/patients/goals")
def api_get_goals(principal: Principal = Depends(require_patient), db=Depends(get_db)):
    goals = PatientOut.from_orm_patient(_own_patient(principal, db)).health_goals.model_dump()
    return {"goals": goals, "progress": goal_progress(goals)}


@router.put("/patients/goals", response_model=HealthGoals)
def api_update_goals(body: GoalsUpdate, principal: Principal = Depends(require_patient), db=Depends(get_db)):
    patient = _own_patient(principal, db)
    if body.steps is not None:
        patient.goal_steps = body.steps
    if body.water is not None:
        patient.goal_water = body.water
    if body.sleep is not None:
        patient.goal_sleep = body.sleep
    db.commit()
    return PatientOut.from_orm_patient(patient).health_goals


# ---------------------------------------------------------------------------
# STAFF / DASHBOARD
# ---------------------------------------------------------------------------

@router.get("/staff", response_model=StaffRoster)
def api_staff_roster(_: Principal = Depends(require_staff), db=Depends(get_db)):
    counts, rows = build_roster(db.query(Staff).order_by(Staff.id).all())
    return StaffRoster(
        doctors=counts["doctor"],
        nurses=counts["nurse"],
        admins=counts["admin"],
        staff=[StaffOut(**row) for row in rows],
    )


@router.get("/dashboard/summary", response_model=DashboardSummary)
def api_dashboard_summary(
    _: Principal = Depends(require_staff),
    db=Depends(get_db),
    store: RequestStore = Depends(get_store),
):
    """Headline counts for the staff dashboard."""
    sos_alerts, queued = triage(store.list())
    patients = db.query(Patient).all()
    critical = sum(1 for p in patients if p.condition == "Critical")
    stable = sum(1 for p in patients if p.condition in ("Stable", "Fair"))
    return DashboardSummary(
        total_patients=len(patients),
        critical_patients=len(sos_alerts) + critical,
        stable_patients=stable,
        doctor_requests=len(queued),
    )


@router.post("/supplies/oxygen")
def api_request_oxygen(
    body: OxygenRequest,
    principal: Principal = Depends(require_staff),
    settings: Settings = Depends(get_settings),
):
    """Log an oxygen cylinder request for the hospital."""
    logger.info("Oxygen cylinder request: hospital=%s quantity=%d requested_by=%s",
                settings.hospital_id, body.quantity, principal.id)
    return {
        "message": f"Request for {body.quantity} oxygen cylinders logged.",
        "hospitalId": settings.hospital_id,
        "quantity": body.quantity,
    }


@router.get("/bmi")
def api_bmi(weight: float = Query(..., description="kg"), height: float = Query(..., description="cm")):
    bmi, category = calculate_bmi(weight, height)
    return {"bmi": bmi, "category": category}


# ---------------------------------------------------------------------------
# WEBSOCKET ENDPOINT
# ---------------------------------------------------------------------------

@router.websocket("/ws/staff")
async def websocket_staff(ws: WebSocket, token: str = Query(default="")):
    """
    Staff dashboards connect here to hear about new and resolved requests.
    Polling /api/requests stays the source of truth.
    """
    try:
        principal = decode_token(token, ws.app.state.settings.jwt_secret)
    except jwt.InvalidTokenError:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if principal.role != ROLE_STAFF:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    hub: DashboardHub = ws.app.state.hub
    await ws.accept()
    hub.register(ws)
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        hub.unregister(ws)


# ---------------------------------------------------------------------------
# ERROR HANDLERS
# ---------------------------------------------------------------------------

def _register_exception_handlers(app: FastAPI):
    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable(request: Request, exc: StoreUnavailableError):
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Request store unavailable, try again."})

    @app.exception_handler(DuplicateRequestError)
    async def duplicate_request(request: Request, exc: DuplicateRequestError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(InvalidBMIInput)
    async def invalid_bmi(request: Request, exc: InvalidBMIInput):
        return JSONResponse(status_code=422, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

def create_app(settings: Optional[Settings] = None, clock: Optional[Callable] = None) -> FastAPI:
    """
    Build the application and the resources it owns.
    ``clock`` overrides the time source used to stamp and age requests.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Jeevrakshak Hospital Backend", version="1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    engine = make_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.clock = clock or utcnow
    app.state.store = RequestStore(app.state.session_factory, clock=app.state.clock)
    app.state.hub = DashboardHub()

    @app.on_event("startup")
    def startup_event():
        """Create tables if missing and seed demo accounts."""
        logger.info("Starting Jeevrakshak backend...")
        init_db(Base, engine)
        if settings.seed_demo_data:
            with app.state.session_factory() as db:
                seed_database(db)

    @app.get("/")
    def root():
        """Basic health check endpoint."""
        return {"message": "Jeevrakshak backend is running!"}

    app.include_router(router)
    _register_exception_handlers(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("jeevrakshak.main:app", host="0.0.0.0", port=8000)

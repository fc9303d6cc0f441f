"""
HTTP surface for the staff directory.
One Synchronizer is started with the application and closed on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .schemas import (
    DedupeResponse,
    EmployeeCreateRequest,
    EmployeeListResponse,
    EmployeeResponse,
    HealthResponse,
    MessageResponse,
)
from ..core.config import VERSION, debug_enabled
from ..core.errors import (
    BackendUnavailable,
    DuplicateRecord,
    PermissionDenied,
    StoreError,
)
from ..core.synchronizer import Synchronizer
from ..util.logging import logger


def error_status(error: StoreError) -> int:
    """HTTP status code for a store error."""
    if isinstance(error, DuplicateRecord):
        return 409
    if isinstance(error, PermissionDenied):
        return 403
    if isinstance(error, BackendUnavailable):
        return 503
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = getattr(app.state, "store_override", None)
    app.state.sync = await Synchronizer.start(store)
    logger.info("Startup complete.")
    try:
        yield
    finally:
        await app.state.sync.close()


# Initialize the FastAPI application
app = FastAPI(
    title="Staff Directory API",
    version=VERSION,
    description="Employee directory with interchangeable record stores",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_sync(request: Request) -> Synchronizer:
    return request.app.state.sync


def _to_response(record) -> EmployeeResponse:
    return EmployeeResponse(**record.to_dict())


@app.get("/health", response_model=HealthResponse)
async def health_check_endpoint(sync: Synchronizer = Depends(get_sync)):
    """Check backend health."""
    db_health = await sync.store.health_check()

    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=VERSION,
        backend=sync.store.backend_name,
        db_health=db_health,
        employee_count=len(sync.employees),
        realtime=sync.subscription is not None,
    )


@app.get("/employees", response_model=EmployeeListResponse)
async def list_employees(sync: Synchronizer = Depends(get_sync)):
    """Current snapshot, newest first."""
    employees = sync.employees
    return EmployeeListResponse(employees=[_to_response(e) for e in employees], count=len(employees))


# Static paths are declared before /employees/{employee_id}
@app.post("/employees/refresh", response_model=EmployeeListResponse)
async def refresh_employees(sync: Synchronizer = Depends(get_sync)):
    employees = await sync.refresh()
    return EmployeeListResponse(employees=[_to_response(e) for e in employees], count=len(employees))


@app.post("/employees/dedupe", response_model=DedupeResponse)
async def remove_duplicates(sync: Synchronizer = Depends(get_sync)):
    try:
        result = await sync.remove_duplicates()
    except StoreError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    return DedupeResponse(removed=result.removed, message=result.message)


@app.post("/employees", response_model=EmployeeResponse, status_code=201)
async def add_employee(request: EmployeeCreateRequest, sync: Synchronizer = Depends(get_sync)):
    try:
        record = await sync.add_employee(
            name=request.name,
            designation=request.designation,
            department=request.department,
            photo_url=request.photo_url,
        )
    except StoreError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    return _to_response(record)


@app.delete("/employees/{employee_id}", response_model=MessageResponse)
async def delete_employee(employee_id: int, sync: Synchronizer = Depends(get_sync)):
    try:
        await sync.delete_employee(employee_id)
    except StoreError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    return MessageResponse(success=True, message="Employee deleted successfully!")


@app.delete("/employees", response_model=MessageResponse)
async def clear_employees(sync: Synchronizer = Depends(get_sync)):
    try:
        await sync.clear_all()
    except StoreError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    return MessageResponse(success=True, message="All employees deleted successfully!")

import asyncio
from typing import Dict, List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from seatmap import settings
from seatmap.cinema import (
    calculate_analytics,
    calculate_stats,
    deselect_all,
    filter_seats,
    generate_initial_seats,
    reconcile_seats,
    select_all,
    selected_seat_ids,
    toggle_seat,
    visual_rows,
)
from seatmap.editor import validate_config
from seatmap.exceptions import DomainError, MalformedImportError
from seatmap.exchange import (
    export_cinema_map,
    export_filename,
    export_selection_csv,
    export_selection_json,
    parse_cinema_map,
)
from seatmap.logger import logger
from seatmap.logging_service import clear_logs, get_logs, log_action
from seatmap.models import Showing
from seatmap.remote_client import fetch_snapshot, push_snapshot
from seatmap.schemas import (
    AddSectionSchema,
    AnalyticsSchema,
    BackRowSchema,
    CinemaConfigSchema,
    CreateShowingSchema,
    ImportResultSchema,
    OccupancySchema,
    SeatSchema,
    SectionStatsSchema,
    ShowingSchema,
    StatsSchema,
    ToggleSeatSchema,
    UpdateSectionSchema,
    UpdateShowingSchema,
    seats_to_schema,
)
from seatmap.storage import BlobStore, CinemaState, FileBlobStore, persist, restore_state

app = FastAPI(
    title="Seat Map Service",
    docs_url="/docs",
    default_response_class=JSONResponse
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.error(f"Domain error: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.error(f"Bad request: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


_store: Optional[BlobStore] = None
_state: Optional[CinemaState] = None


def get_store() -> BlobStore:
    global _store
    if _store is None:
        _store = FileBlobStore(settings.STATE_FILE)
    return _store


def get_remote_url() -> str:
    return settings.REMOTE_SYNC_URL


def get_state(store: BlobStore = Depends(get_store), remote_url: str = Depends(get_remote_url)) -> CinemaState:
    """Состояние загружается один раз: локальный снимок, иначе удалённый"""
    global _state
    if _state is None:
        blob = store.load()
        if blob is None and remote_url:
            blob = fetch_snapshot(remote_url)
        _state = restore_state(blob)
    return _state


def save(state: CinemaState, store: BlobStore, remote_url: str, background_tasks: BackgroundTasks):
    blob = persist(state, store)
    if remote_url:
        # Локальное состояние не ждёт удалённое хранилище
        background_tasks.add_task(push_snapshot, remote_url, blob)


def showing_schema(showing: Showing) -> ShowingSchema:
    return ShowingSchema(id=showing.id, title=showing.title, schedule=showing.schedule, price=showing.price)


def stats_schema(seats) -> OccupancySchema:
    stats = calculate_stats(seats)
    return OccupancySchema(selected=stats.selected, available=stats.available, total=stats.total,
                           occupancy=stats.occupancy)


@app.on_event("startup")
def startup():
    logger.info("Seat Map Service started")


# Конфигурация зала
@app.get("/config", response_model=CinemaConfigSchema)
def get_config(state: CinemaState = Depends(get_state)):
    logger.info("GET /config")
    return CinemaConfigSchema.from_model(state.config)


@app.put("/config", response_model=CinemaConfigSchema)
def apply_config(
    data: CinemaConfigSchema,
    background_tasks: BackgroundTasks,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    """Установить новую схему зала; карты сеансов перестраиваются"""
    logger.info(f"PUT /config - {len(data.sections)} sections")
    config = data.to_model()
    validate_config(config)
    state.apply_config(config)
    save(state, store, remote_url, background_tasks)
    log_action("APPLY_CONFIG", details={"name": config.name, "total_seats": config.total_seats})
    return CinemaConfigSchema.from_model(state.config)


@app.get("/config/draft", response_model=CinemaConfigSchema)
def get_draft(state: CinemaState = Depends(get_state)):
    logger.info("GET /config/draft")
    return CinemaConfigSchema.from_model(state.editor.draft)


@app.post("/config/draft/sections", response_model=CinemaConfigSchema)
def add_draft_section(data: Optional[AddSectionSchema] = None, state: CinemaState = Depends(get_state)):
    logger.info("POST /config/draft/sections")
    data = data or AddSectionSchema()
    draft = state.editor.add_section(name=data.name, rows=data.rows, seats_per_row=data.seats_per_row,
                                     prefix=data.prefix)
    return CinemaConfigSchema.from_model(draft)


@app.patch("/config/draft/sections/{index}", response_model=CinemaConfigSchema)
def change_draft_section(index: int, data: UpdateSectionSchema, state: CinemaState = Depends(get_state)):
    logger.info(f"PATCH /config/draft/sections/{index}")
    draft = state.editor.change_section(index, name=data.name, rows=data.rows, seats_per_row=data.seats_per_row)
    return CinemaConfigSchema.from_model(draft)


@app.delete("/config/draft/sections/{index}", response_model=CinemaConfigSchema)
def remove_draft_section(index: int, state: CinemaState = Depends(get_state)):
    logger.info(f"DELETE /config/draft/sections/{index}")
    return CinemaConfigSchema.from_model(state.editor.remove_section(index))


@app.put("/config/draft/back-row", response_model=CinemaConfigSchema)
def change_draft_back_row(data: BackRowSchema, state: CinemaState = Depends(get_state)):
    logger.info("PUT /config/draft/back-row")
    return CinemaConfigSchema.from_model(state.editor.set_back_row(seats=data.seats, name=data.name))


@app.post("/config/draft/save")
def save_draft(state: CinemaState = Depends(get_state)):
    logger.info("POST /config/draft/save")
    index = state.editor.save()
    return {"status": "ok", "index": index, "saved": len(state.editor.saved)}


@app.get("/config/saved", response_model=List[CinemaConfigSchema])
def list_saved_configs(state: CinemaState = Depends(get_state)):
    logger.info("GET /config/saved")
    return [CinemaConfigSchema.from_model(c) for c in state.editor.saved]


@app.post("/config/saved/{index}/load", response_model=CinemaConfigSchema)
def load_saved_config(index: int, state: CinemaState = Depends(get_state)):
    logger.info(f"POST /config/saved/{index}/load")
    return CinemaConfigSchema.from_model(state.editor.load(index))


@app.post("/config/draft/reset", response_model=CinemaConfigSchema)
def reset_draft(state: CinemaState = Depends(get_state)):
    logger.info("POST /config/draft/reset")
    return CinemaConfigSchema.from_model(state.editor.reset())


@app.post("/config/draft/apply", response_model=CinemaConfigSchema)
def apply_draft(
    background_tasks: BackgroundTasks,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    logger.info("POST /config/draft/apply")
    config = state.editor.apply()
    state.apply_config(config)
    save(state, store, remote_url, background_tasks)
    log_action("APPLY_CONFIG", details={"name": config.name, "total_seats": config.total_seats})
    return CinemaConfigSchema.from_model(state.config)


# Сеансы
@app.get("/showings", response_model=List[ShowingSchema])
def get_showings(state: CinemaState = Depends(get_state)):
    logger.info("GET /showings")
    return [showing_schema(s) for s in state.book.all()]


@app.post("/showings", response_model=ShowingSchema)
def create_showing(
    background_tasks: BackgroundTasks,
    data: Optional[CreateShowingSchema] = None,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    data = data or CreateShowingSchema()
    logger.info(f"POST /showings - {data.title} ({data.schedule})")
    showing = state.book.add(state.config, title=data.title, schedule=data.schedule, price=data.price)
    save(state, store, remote_url, background_tasks)
    log_action("CREATE_SHOWING", details={"showing_id": showing.id, "title": showing.title})
    return showing_schema(showing)


@app.get("/showings/{showing_id}", response_model=ShowingSchema)
def get_showing(showing_id: int, state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}")
    return showing_schema(state.book.get(showing_id))


@app.patch("/showings/{showing_id}", response_model=ShowingSchema)
def update_showing(
    showing_id: int,
    data: UpdateShowingSchema,
    background_tasks: BackgroundTasks,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    logger.info(f"PATCH /showings/{showing_id}")
    showing = state.book.update(showing_id, title=data.title, schedule=data.schedule, price=data.price)
    save(state, store, remote_url, background_tasks)
    return showing_schema(showing)


@app.delete("/showings/{showing_id}")
def delete_showing(
    showing_id: int,
    background_tasks: BackgroundTasks,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    logger.info(f"DELETE /showings/{showing_id}")
    showing = state.book.remove(showing_id)
    save(state, store, remote_url, background_tasks)
    log_action("DELETE_SHOWING", details={"showing_id": showing_id, "title": showing.title})
    return {"status": "ok", "message": "Showing deleted"}


# Места
@app.get("/showings/{showing_id}/seats", response_model=Dict[str, SeatSchema], response_model_exclude_none=True)
def get_seats(showing_id: int, mode: str = Query("all", alias="filter"), state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}/seats?filter={mode}")
    seats = filter_seats(state.book.get(showing_id).seats, mode)
    return seats_to_schema(seats)


@app.get("/showings/{showing_id}/rows", response_model=List[List[SeatSchema]], response_model_exclude_none=True)
def get_rows(showing_id: int, state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}/rows")
    rows = visual_rows(state.config, state.book.get(showing_id).seats)
    return [[SeatSchema.from_model(seat) for seat in row] for row in rows]


@app.post("/showings/{showing_id}/seats/select-all", response_model=OccupancySchema)
def select_all_seats(
    showing_id: int,
    background_tasks: BackgroundTasks,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    logger.info(f"POST /showings/{showing_id}/seats/select-all")
    showing = state.book.get(showing_id)
    state.book.replace_seats(showing_id, select_all(showing.seats))
    save(state, store, remote_url, background_tasks)
    return stats_schema(showing.seats)


@app.post("/showings/{showing_id}/seats/deselect-all", response_model=OccupancySchema)
def deselect_all_seats(
    showing_id: int,
    background_tasks: BackgroundTasks,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    logger.info(f"POST /showings/{showing_id}/seats/deselect-all")
    showing = state.book.get(showing_id)
    state.book.replace_seats(showing_id, deselect_all(showing.seats))
    save(state, store, remote_url, background_tasks)
    return stats_schema(showing.seats)


@app.post("/showings/{showing_id}/seats/{seat_id}/toggle", response_model=SeatSchema, response_model_exclude_none=True)
def toggle(
    showing_id: int,
    seat_id: str,
    background_tasks: BackgroundTasks,
    data: Optional[ToggleSeatSchema] = None,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    """Переключить место; при выборе можно передать данные брони"""
    logger.info(f"POST /showings/{showing_id}/seats/{seat_id}/toggle")
    showing = state.book.get(showing_id)
    reservation = data.reserva.to_model() if data and data.reserva else None
    state.book.replace_seats(showing_id, toggle_seat(showing.seats, seat_id, reservation))
    save(state, store, remote_url, background_tasks)

    seat = showing.seats[seat_id]
    logger.info(f"Seat {seat_id} of showing {showing_id} updated to selected={seat.selected}")
    log_action("TOGGLE_SEAT", details={"showing_id": showing_id, "seat_id": seat_id, "selected": seat.selected})
    return SeatSchema.from_model(seat)


# Статистика
@app.get("/showings/{showing_id}/stats", response_model=OccupancySchema)
def get_stats(showing_id: int, state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}/stats")
    return stats_schema(state.book.get(showing_id).seats)


@app.get("/showings/{showing_id}/analytics", response_model=AnalyticsSchema)
def get_analytics(showing_id: int, state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}/analytics")
    showing = state.book.get(showing_id)
    analytics = calculate_analytics(state.config, showing.seats, price=showing.price)
    return AnalyticsSchema(
        stats=stats_schema(showing.seats),
        sections=[
            SectionStatsSchema(name=s.name, selected=s.selected, available=s.available, total=s.total,
                               occupancy=s.occupancy)
            for s in analytics.sections
        ],
        price=analytics.price,
        revenue=analytics.revenue,
    )


# Экспорт и импорт
@app.get("/showings/{showing_id}/export")
def export_map(showing_id: int, state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}/export")
    text = export_cinema_map(state.book.get(showing_id).seats, state.config)
    return Response(
        content=text,
        media_type="application/json; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("map", "json")}"'},
    )


def replace_with_import(showing_id: int, text: str, state: CinemaState, store: BlobStore, remote_url: str,
                        background_tasks: BackgroundTasks) -> ImportResultSchema:
    try:
        seats = parse_cinema_map(text)
        status, message = "success", "Map imported successfully"
    except MalformedImportError as e:
        logger.error(f"Error importing cinema map: {e.message}")
        seats = generate_initial_seats(state.config)
        status, message = "error", "Could not import the file. Check that it is a valid map export."

    # карта сеанса всегда покрывает ровно места активной схемы
    showing = state.book.replace_seats(showing_id, reconcile_seats(state.config, seats))
    save(state, store, remote_url, background_tasks)
    log_action("IMPORT_MAP", details={"showing_id": showing_id, "status": status})

    stats = calculate_stats(showing.seats)
    return ImportResultSchema(
        status=status,
        message=message,
        stats=StatsSchema(selected=stats.selected, available=stats.available, total=stats.total),
    )


@app.post("/showings/{showing_id}/import", response_model=ImportResultSchema)
async def import_map(
    showing_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    state: CinemaState = Depends(get_state),
    store: BlobStore = Depends(get_store),
    remote_url: str = Depends(get_remote_url),
):
    """Загрузить выгрузку карты; при ошибке карта сеанса сбрасывается"""
    logger.info(f"POST /showings/{showing_id}/import")
    state.book.get(showing_id)
    text = (await request.body()).decode("utf-8", errors="replace")
    return await asyncio.to_thread(
        replace_with_import, showing_id, text, state, store, remote_url, background_tasks
    )


@app.get("/showings/{showing_id}/selection.json")
def export_selection_as_json(showing_id: int, state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}/selection.json")
    text = export_selection_json(selected_seat_ids(state.book.get(showing_id).seats))
    return Response(
        content=text,
        media_type="application/json; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("selection", "json")}"'},
    )


@app.get("/showings/{showing_id}/selection.csv")
def export_selection_as_csv(showing_id: int, state: CinemaState = Depends(get_state)):
    logger.info(f"GET /showings/{showing_id}/selection.csv")
    text = export_selection_csv(selected_seat_ids(state.book.get(showing_id).seats))
    return Response(
        content=text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("selection", "csv")}"'},
    )


# Журнал действий
@app.get("/actions")
def get_user_actions(limit: int = 100):
    logger.info("GET /actions")
    logs = get_logs(limit)
    return {"logs": logs, "total_lines": len(logs)}


@app.delete("/actions")
def clear_user_actions():
    logger.info("DELETE /actions")
    if clear_logs():
        return {"status": "ok", "message": "Action log cleared"}
    return {"status": "ok", "message": "Action log not found"}

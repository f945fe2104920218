"""
FastAPI main application for the Inventario Library API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from api.config import config as api_config
from api.models import (
    AuthorCreatedResponse, BookWrittenResponse,
    CreateAuthorRequest, CreateBookRequest, UpdateBookRequest,
    ErrorResponse, HealthResponse
)
from inventory.database import InventoryDatabase
from inventory.errors import (
    InventoryError, InvalidIdentifier, NotFound,
    UnknownAuthors, UpstreamUnavailable, ValidationError
)
from inventory.identifiers import identifier_to_string, parse_identifier, parse_identifiers
from inventory.models import Book, BookQuery
from utilities.config import config
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)

ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidIdentifier, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (UpstreamUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)

ID_REQUIRED = "Proporciona un id"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )
    logger.info("Starting Inventario API")

    # Connection failure here is fatal to the process
    inventory = InventoryDatabase.from_config(config)
    await inventory.connect()
    app.state.inventory = inventory

    yield

    logger.info("Shutting down Inventario API")
    await inventory.disconnect()


app = FastAPI(
    title=api_config.api_title,
    description=api_config.api_description,
    version=api_config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=api_config.cors_allow_credentials,
    allow_methods=api_config.cors_allow_methods,
    allow_headers=api_config.cors_allow_headers,
)


def get_inventory(request: Request) -> InventoryDatabase:
    """Store context built at startup."""
    inventory = getattr(request.app.state, "inventory", None)
    if inventory is None:
        raise UpstreamUnavailable("Database service not available")
    return inventory


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump()
    )


# Exception handlers
@app.exception_handler(InventoryError)
async def inventory_exception_handler(request: Request, exc: InventoryError):
    """Map inventory errors to status codes."""
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if status_code >= 500:
        logger.error("Request failed", error=exc.message, path=request.url.path)
    else:
        logger.info("Request rejected", error=exc.message, path=request.url.path, status_code=status_code)
    return error_response(status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Reject malformed request bodies with 400."""
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(problems))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=exc.headers
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc) if api_config.debug else "Internal server error"
    )


async def require_existing_authors(inventory: InventoryDatabase, author_ids) -> None:
    """Raise UnknownAuthors unless every id names a stored author."""
    missing = await inventory.resolver.missing_authors(author_ids)
    if missing:
        raise UnknownAuthors(
            "Alguno de los autores no existe.",
            author_ids=[identifier_to_string(author_id) for author_id in missing]
        )


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    inventory = getattr(request.app.state, "inventory", None)
    db_status = "unavailable"
    if inventory is not None:
        health_info = await inventory.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=api_config.api_version,
        database_status=db_status
    )


# Books endpoints
@app.get("/libros", response_model=List[Book], tags=["Books"])
async def list_books(
    titulo: Optional[str] = None,
    inventory: InventoryDatabase = Depends(get_inventory)
):
    """
    List books with their authors expanded.

    - **titulo**: Case-insensitive title substring
    """
    records = await inventory.books.find_books(BookQuery(title=titulo or None))
    if not records:
        raise NotFound("No se han encontrado libros con este titulo.")
    return await inventory.resolver.project_books(records)


@app.get("/libro", response_model=Book, tags=["Books"])
async def get_book(
    book_id: Optional[str] = Query(None, alias="id"),
    inventory: InventoryDatabase = Depends(get_inventory)
):
    """
    Get a single book by ID.

    - **id**: Book identifier (MongoDB ObjectId)
    """
    if not book_id:
        raise ValidationError(ID_REQUIRED)

    record = await inventory.books.find_book_by_id(parse_identifier(book_id))
    if record is None:
        raise NotFound("No se ha encontrado el libro")
    return await inventory.resolver.project_book(record)


@app.post("/libro", response_model=BookWrittenResponse, tags=["Books"])
async def create_book(
    body: CreateBookRequest,
    inventory: InventoryDatabase = Depends(get_inventory)
):
    """Create a book referencing existing authors."""
    if not body.title:
        raise ValidationError("Los campos de libro y autores son campos necesarios.")

    author_ids = parse_identifiers(body.authors)
    await require_existing_authors(inventory, author_ids)

    record = await inventory.books.create_book(body.title, author_ids, body.numsOfCopies)
    return BookWrittenResponse(
        message="Libro creado exitosamente",
        libro=await inventory.resolver.project_book(record)
    )


@app.put("/libro", response_model=BookWrittenResponse, tags=["Books"])
async def update_book(
    body: UpdateBookRequest,
    inventory: InventoryDatabase = Depends(get_inventory)
):
    """
    Replace fields of a book.

    numsOfCopies is reset to 0 unless it is sent again.
    """
    if not body.id:
        raise ValidationError(ID_REQUIRED)

    book_id = parse_identifier(body.id)
    author_ids = None
    if body.authors is not None:
        author_ids = parse_identifiers(body.authors)
        await require_existing_authors(inventory, author_ids)

    record = await inventory.books.update_book(
        book_id,
        title=body.title,
        author_ids=author_ids,
        nums_of_copies=body.numsOfCopies
    )
    return BookWrittenResponse(
        message="Libro actualizado correctamente",
        libro=await inventory.resolver.project_book(record)
    )


@app.delete("/libro", response_model=str, tags=["Books"])
async def delete_book(
    book_id: Optional[str] = Query(None, alias="id"),
    inventory: InventoryDatabase = Depends(get_inventory)
):
    """Delete a book by ID."""
    if not book_id:
        raise ValidationError(ID_REQUIRED)

    if not await inventory.books.delete_book(parse_identifier(book_id)):
        raise NotFound("Libro no encontrado")
    return "Libro eliminado exitosamente"


# Authors endpoints
@app.post("/autor", response_model=AuthorCreatedResponse, tags=["Authors"])
async def create_author(
    body: CreateAuthorRequest,
    inventory: InventoryDatabase = Depends(get_inventory)
):
    """Create an author."""
    record = await inventory.authors.create_author(body.name, body.biography)
    return AuthorCreatedResponse(
        message="Autor creado exitosamente.",
        autor=record.to_view()
    )


# Must stay last so real routes match first
@app.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    include_in_schema=False
)
async def endpoint_not_found(path: str):
    return PlainTextResponse("endpoint not found")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level="info"
    )

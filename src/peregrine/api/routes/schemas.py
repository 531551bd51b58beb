"""Schemas API endpoints.

POST /api/schemas - Create a schema (validated before storing)
GET /api/schemas/{schema_id} - Get a stored schema
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from peregrine.api.app import get_db_session
from peregrine.core.errors import SchemaIntegrityError
from peregrine.db import repo
from peregrine.db.repo import DbSession
from peregrine.models.types import SchemaCreate, SchemaDetail, SchemaFieldPayload
from peregrine.summary.schema import parse_schema

router = APIRouter()


@router.post("/schemas", response_model=SchemaDetail, status_code=201)
def create_schema(
    request: SchemaCreate,
    session: DbSession = Depends(get_db_session),
) -> SchemaDetail:
    """Create a schema.

    Raises:
        HTTPException: 422 if a field references an undefined field,
            reuses a name, or forms a reference cycle.
    """
    try:
        parse_schema(request.fields)
    except SchemaIntegrityError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    fields = [field.model_dump(exclude_none=True) for field in request.fields]
    entity = repo.create_schema(session, fields, year=request.year)
    repo.commit(session)

    return SchemaDetail(schema_id=entity.schema_id, year=entity.year, fields=request.fields)


@router.get("/schemas/{schema_id}", response_model=SchemaDetail)
def get_schema(
    schema_id: int,
    session: DbSession = Depends(get_db_session),
) -> SchemaDetail:
    """Get a stored schema by ID."""
    entity = repo.get_schema_entity(session, schema_id)
    if entity is None:
        raise HTTPException(status_code=404, detail="Schema not found")

    return SchemaDetail(
        schema_id=entity.schema_id,
        year=entity.year,
        fields=[SchemaFieldPayload.model_validate(field) for field in entity.fields],
    )

"""Secret CRUD and search routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from keyvault.api.deps import get_project_key, require_read, require_write
from keyvault.api.models import SearchInput, SecretInput, SecretOut, SecretValueOnly
from keyvault.vault.dal import delete_secret, get_secret, upsert_secret
from keyvault.vault.search import search_secrets

router = APIRouter(tags=["secrets"])


@router.get("/secrets/{key}", dependencies=[Depends(require_read)])
def api_get_secret(key: str, project_key: str = Depends(get_project_key)):
    value = get_secret(project_key, key)
    if value is None:
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse(value)


@router.post("/secrets", status_code=204, dependencies=[Depends(require_write)])
def api_upsert_secret(body: SecretInput, project_key: str = Depends(get_project_key)):
    upsert_secret(project_key, body.key, body.value)
    return Response(status_code=204)


@router.put("/secrets/{key}", status_code=204, dependencies=[Depends(require_write)])
def api_upsert_secret_by_path(
    key: str,
    body: SecretValueOnly,
    project_key: str = Depends(get_project_key),
):
    upsert_secret(project_key, key, body.value)
    return Response(status_code=204)


@router.delete("/secrets/{key}", status_code=204, dependencies=[Depends(require_write)])
def api_delete_secret(key: str, project_key: str = Depends(get_project_key)):
    delete_secret(project_key, key)
    return Response(status_code=204)


@router.post("/search", response_model=list[SecretOut], dependencies=[Depends(require_read)])
def api_search_secrets(body: SearchInput, project_key: str = Depends(get_project_key)):
    records = search_secrets(project_key, body.query, key_contains=body.key_contains)
    return [record.to_dict() for record in records]

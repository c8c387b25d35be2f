from fastapi.responses import JSONResponse

from .errors import CatalogError


def error_response(payload: dict, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, **payload})


def catalog_error_response(exc: CatalogError) -> JSONResponse:
    return error_response(exc.to_payload(), exc.http_status())

from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(message: str, data: Optional[Dict[str, Any]] = None, status_code: int = 200) -> JSONResponse:
    """Wrap a successful result in the response envelope"""
    content: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        content["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=content)


def error_response(
    status_code: int,
    message: str,
    error: Optional[str] = None,
    errors: Optional[Dict[str, List[str]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Wrap a failure in the response envelope"""
    content: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)

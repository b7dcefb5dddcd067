"""
Request size limiting middleware for FastAPI.
Rejects oversized bodies and payloads that would fan out into too many
sizing or pricing runs.
"""
from typing import Any, Dict, Optional, Set
import json
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from infrasizing.core.config import config

logger = logging.getLogger(__name__)


MAX_COMPARE_CONTEXTS = 20
MAX_VM_ROLES_PER_ENVIRONMENT = 100

# Endpoints that accept a JSON body
PROTECTED_ENDPOINTS: Set[str] = {
    "/api/sizing/k8s",
    "/api/sizing/vm",
    "/api/costs/estimate",
    "/api/costs/compare",
    "/api/costs/licensed-platform",
    "/api/growth/project",
}


def _too_large(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={
            "status": "error",
            "error": "request_too_large",
            "message": message,
        }
    )


class RequestSizeLimiterMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for request size limiting.

    Applies size limits only to configured endpoints.
    Other routes pass through untouched.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: Optional[int] = None):
        super().__init__(app)
        self.max_body_bytes = max_body_bytes or config.MAX_REQUEST_BODY_BYTES

    async def dispatch(self, request: Request, call_next):
        """
        Process request and apply size limits if applicable.

        Args:
            request: FastAPI request object
            call_next: Next middleware or route handler

        Returns:
            Response object
        """
        path = request.url.path
        if path not in PROTECTED_ENDPOINTS:
            return await call_next(request)

        content_length = request.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_bytes:
            logger.info("Request body size exceeded for %s: %s bytes (limit: %d)",
                        path, content_length, self.max_body_bytes)
            return _too_large(f"Request body exceeds the limit of {self.max_body_bytes} bytes.")

        body_bytes = await request.body()
        if len(body_bytes) > self.max_body_bytes:
            logger.info("Request body size exceeded for %s: %d bytes (limit: %d)",
                        path, len(body_bytes), self.max_body_bytes)
            return _too_large(f"Request body exceeds the limit of {self.max_body_bytes} bytes.")

        if body_bytes:
            try:
                body_json = json.loads(body_bytes.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                # Malformed bodies are reported by FastAPI's own validation
                body_json = None
            if isinstance(body_json, dict):
                validation_error = self._validate_payload(path, body_json)
                if validation_error:
                    logger.info("Payload validation failed for %s: %s", path, validation_error)
                    return _too_large(validation_error)

        # Restore the body so it is readable downstream
        async def receive():
            return {"type": "http.request", "body": body_bytes}

        request._receive = receive
        return await call_next(request)

    def _validate_payload(self, path: str, body_json: Dict[str, Any]) -> Optional[str]:
        """
        Validate payload-specific constraints based on endpoint.

        Returns:
            Error message if validation fails, None if valid
        """
        if path == "/api/costs/compare":
            clouds = body_json.get("clouds") or []
            if isinstance(clouds, list) and len(clouds) > MAX_COMPARE_CONTEXTS:
                return f"Too many pricing contexts: {len(clouds)} (limit: {MAX_COMPARE_CONTEXTS})"

        vm_sizing = body_json if path == "/api/sizing/vm" else body_json.get("vm_sizing")
        if isinstance(vm_sizing, dict):
            return self._validate_vm_roles(vm_sizing)
        return None

    @staticmethod
    def _validate_vm_roles(vm_sizing: Dict[str, Any]) -> Optional[str]:
        environments = vm_sizing.get("environments") or {}
        if not isinstance(environments, dict):
            return None
        for name, environment in environments.items():
            roles = environment.get("roles") if isinstance(environment, dict) else None
            if isinstance(roles, list) and len(roles) > MAX_VM_ROLES_PER_ENVIRONMENT:
                return (
                    f"Too many server roles in '{name}': {len(roles)} "
                    f"(limit: {MAX_VM_ROLES_PER_ENVIRONMENT})"
                )
        return None

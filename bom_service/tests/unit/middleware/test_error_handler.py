"""
Unit tests for BOM Service Error Handling
Tests exception handling, error envelopes, and status mapping.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bom_service.app.core.exceptions import (
    AlreadyExistsError,
    BomServiceError,
    CategoryCycleError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from bom_service.app.middleware.error.error_handler import (
    BomServiceErrorHandler,
    setup_bom_error_handling,
)


class _Sample(BaseModel):
    quantity: int


class TestBomServiceErrorHandler:
    """Test cases for error handling"""

    @pytest.fixture
    def app(self):
        app = FastAPI()
        BomServiceErrorHandler.setup_error_handlers(app)
        return app

    @pytest.fixture
    def mock_request(self):
        """Create mock request"""
        request = MagicMock(spec=Request)
        request.url.path = "/api/v1/categories"
        request.method = "POST"
        request.state = MagicMock()
        request.state.correlation_id = "test-correlation-id"
        request.state.user_id = 7
        return request

    def test_setup_bom_error_handling_registers_handlers(self):
        app = FastAPI()
        initial_handlers = len(app.exception_handlers)

        setup_bom_error_handling(app)

        assert len(app.exception_handlers) > initial_handlers
        assert BomServiceError in app.exception_handlers

    @pytest.mark.parametrize(
        "exc,status_code,error_type",
        [
            (UnauthorizedError("Authentication required"), 401, "authentication_error"),
            (ForbiddenError("Not yours"), 403, "permission_error"),
            (NotFoundError("Category 1 not found"), 404, "not_found"),
            (InvalidInputError("Bad parent"), 400, "value_error"),
            (AlreadyExistsError("Exists"), 409, "already_exists"),
            (CategoryCycleError("Cycle"), 409, "category_cycle"),
        ],
    )
    async def test_domain_errors(
        self, app, mock_request, exc, status_code, error_type
    ):
        handler = app.exception_handlers[BomServiceError]

        response = await handler(mock_request, exc)

        assert response.status_code == status_code
        body = json.loads(response.body.decode())
        assert body["error"]["type"] == error_type
        assert body["error"]["message"] == exc.message
        assert body["error"]["correlation_id"] == "test-correlation-id"
        assert body["error"]["user_id"] == 7
        assert body["error"]["path"] == "/api/v1/categories"
        assert body["error"]["method"] == "POST"

    async def test_domain_error_details_included(self, app, mock_request):
        handler = app.exception_handlers[BomServiceError]
        exc = CategoryCycleError("Cycle", details={"category_id": 1, "parent_id": 3})

        response = await handler(mock_request, exc)

        body = json.loads(response.body.decode())
        assert body["error"]["details"] == {"category_id": 1, "parent_id": 3}

    async def test_generic_domain_error_hides_message(self, app, mock_request):
        handler = app.exception_handlers[BomServiceError]

        response = await handler(mock_request, BomServiceError("db password leaked"))

        assert response.status_code == 500
        body = json.loads(response.body.decode())
        assert body["error"]["message"] == "An internal server error occurred"

    async def test_http_exception(self, app, mock_request):
        handler = app.exception_handlers[StarletteHTTPException]

        response = await handler(
            mock_request, StarletteHTTPException(status_code=404, detail="Not found")
        )

        assert response.status_code == 404
        body = json.loads(response.body.decode())
        assert body["error"]["type"] == "http_error"
        assert body["error"]["message"] == "Not found"

    async def test_request_validation_error(self, app, mock_request):
        handler = app.exception_handlers[RequestValidationError]
        exc = RequestValidationError(
            [
                {
                    "loc": ("body", "name"),
                    "msg": "Field required",
                    "type": "missing",
                }
            ]
        )

        response = await handler(mock_request, exc)

        assert response.status_code == 422
        body = json.loads(response.body.decode())
        assert body["error"]["type"] == "validation_error"
        assert body["error"]["details"]["validation_errors"] == [
            {"field": "body.name", "message": "Field required", "type": "missing"}
        ]

    async def test_pydantic_validation_error(self, app, mock_request):
        handler = app.exception_handlers[ValidationError]
        with pytest.raises(ValidationError) as exc_info:
            _Sample.model_validate({"quantity": "many"})

        response = await handler(mock_request, exc_info.value)

        assert response.status_code == 400
        body = json.loads(response.body.decode())
        assert body["error"]["type"] == "data_validation_error"
        assert body["error"]["details"]["validation_errors"][0]["field"] == "quantity"

    async def test_unhandled_exception(self, app, mock_request):
        handler = app.exception_handlers[Exception]

        response = await handler(mock_request, RuntimeError("boom"))

        assert response.status_code == 500
        body = json.loads(response.body.decode())
        assert body["error"]["type"] == "internal_server_error"
        assert "boom" not in body["error"]["message"]

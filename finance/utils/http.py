import json
import logging
from decimal import Decimal
from functools import wraps

from django.core.exceptions import BadRequest, ObjectDoesNotExist, ValidationError
from django.http import Http404, JsonResponse

from ..exceptions import FinanceError
from ..serializers import error_key, form_errors, payload_to_form_data

logger = logging.getLogger(__name__)


def parse_json_body(request) -> dict:
    """
    Decode a JSON object body into snake_case form data.

    Numbers with a fractional part are decoded as ``Decimal`` so money never
    passes through a float.
    """
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body, parse_float=Decimal)
    except (ValueError, UnicodeDecodeError):
        raise BadRequest("Malformed JSON body")
    if not isinstance(payload, dict):
        raise BadRequest("JSON body must be an object")
    return payload_to_form_data(payload)


def query_params(request) -> dict:
    return payload_to_form_data(request.GET.dict())


def validation_error(form) -> JsonResponse:
    return JsonResponse({"error": "Validation failed", "fields": form_errors(form)}, status=400)


def api_view(view):
    """Map domain and unexpected errors raised by a JSON view to HTTP responses."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except FinanceError as exc:
            logger.info(f"{view.__name__}: {exc.message} {exc.context}")
            return JsonResponse({"error": exc.message}, status=exc.status_code)
        except (Http404, ObjectDoesNotExist):
            return JsonResponse({"error": "Not found"}, status=404)
        except BadRequest as exc:
            return JsonResponse({"error": str(exc)}, status=400)
        except ValidationError as exc:
            if hasattr(exc, "error_dict"):
                fields = {error_key(name): messages for name, messages in exc.message_dict.items()}
            else:
                fields = {"nonFieldErrors": exc.messages}
            return JsonResponse({"error": "Validation failed", "fields": fields}, status=400)
        except Exception:
            logger.exception(f"Unhandled error in {view.__name__} ({request.method} {request.path})")
            return JsonResponse({"error": "Internal server error"}, status=500)

    return wrapper

"""AWS Lambda handler for the HR event calendar API."""
import asyncio
import json
import logging
import os
import time
from datetime import date
from typing import Any, Dict, Optional

from calendar_view.controller import ViewController, ViewState
from calendar_view.date_range import ViewMode
from calendar_view.holiday_classifier import HolidayClassifier, HolidayTable
from calendar_view.listing import search_events
from processor.event_processor import EventProcessor
from processor.exceptions import CalendarError, ValidationError
from processor.models import Notice
from storage.dynamodb_manager import DynamoDBManager


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def load_holiday_table(
    path: Optional[str],
    url: Optional[str],
    timeout: int
) -> HolidayTable:
    """
    Pick the holiday table: remote URL, then local path, then the bundled one.

    A failed download falls back to the local or bundled table.
    """
    logger = logging.getLogger(__name__)

    if url:
        try:
            return HolidayTable.fetch(url, timeout=timeout)
        except CalendarError as e:
            logger.warning(f"Using local holiday table, download failed: {e}")

    if path:
        return HolidayTable.load(path)

    return HolidayTable.default()


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json; charset=utf-8'},
        'body': json.dumps(body, ensure_ascii=False)
    }


def _notice_response(controller: ViewController, success_status: int, body: Dict[str, Any]) -> Dict[str, Any]:
    notice = controller.notice
    if notice is None:
        return _response(success_status, body)
    if notice.kind == Notice.STALE:
        status_code = success_status
    elif notice.kind == Notice.VALIDATION:
        status_code = 400
    else:
        status_code = 502
    return _response(status_code, {**body, 'notice': notice.to_dict()})


def _parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    raw = event.get('body') or '{}'
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    return body


def _parse_reference_date(value: Optional[str], today: date) -> date:
    if not value:
        return today
    normalized = EventProcessor().normalize_date(value)
    if not normalized:
        raise ValidationError(f"Invalid date parameter: {value!r}")
    return date.fromisoformat(normalized)


async def _route(controller: ViewController, event: Dict[str, Any]) -> Dict[str, Any]:
    method = (event.get('httpMethod') or 'GET').upper()
    path = (event.get('path') or '/').rstrip('/') or '/'
    params = event.get('queryStringParameters') or {}
    path_params = event.get('pathParameters') or {}

    if method == 'GET' and path == '/calendar':
        controller.state.reference_date = _parse_reference_date(params.get('date'), controller.clock())
        controller.set_mode(params.get('mode') or ViewMode.MONTH)
        if params.get('nav'):
            await controller.navigate(params['nav'])
        else:
            await controller.refresh()
        return _notice_response(controller, 200, controller.render())

    if method == 'GET' and path == '/events':
        await controller.refresh()
        matches = search_events(controller.events, params.get('q', ''))
        return _notice_response(controller, 200, {
            'events': [item.to_dict() for item in matches],
            'count': len(matches)
        })

    if method == 'GET' and path == '/notifications':
        await controller.refresh()
        todays = controller.todays_events
        return _notice_response(controller, 200, {
            'date': controller.clock().isoformat(),
            'events': [item.to_dict() for item in todays],
            'count': len(todays)
        })

    if method == 'POST' and path == '/events':
        body = _parse_body(event)
        created = await controller.create_event(
            title=body.get('title'),
            event_date=body.get('event_date', body.get('date')),
            event_type=body.get('type'),
            description=body.get('description'),
            memo=body.get('memo')
        )
        return _notice_response(controller, 201, {
            'event': created.to_dict() if created else None
        })

    if method == 'POST' and path == '/events/bulk':
        body = _parse_body(event)
        rows = body.get('events')
        if not isinstance(rows, list):
            raise ValidationError("Request body must contain an 'events' list")
        created = await controller.import_events(rows)
        return _notice_response(controller, 201, {
            'events': [item.to_dict() for item in created],
            'count': len(created)
        })

    if method == 'DELETE' and path.startswith('/events/'):
        event_id = path_params.get('id') or path[len('/events/'):]
        await controller.delete_event(event_id)
        return _notice_response(controller, 200, {'deleted': event_id})

    return _response(404, {'message': f"No route for {method} {path}"})


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the HR event calendar.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response with a JSON body
    """
    # Read configuration from environment variables
    table_name = os.environ.get('TABLE_NAME', 'hr-calendar-events')
    region_name = os.environ.get('AWS_REGION') or None
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    holiday_path = os.environ.get('HOLIDAY_TABLE_PATH') or None
    holiday_url = os.environ.get('HOLIDAY_TABLE_URL') or None
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    method = event.get('httpMethod', 'GET')
    path = event.get('path', '/')
    logger.info(f"Request started: {method} {path}")

    try:
        store = DynamoDBManager(table_name=table_name, region_name=region_name)
        table = load_holiday_table(holiday_path, holiday_url, timeout_seconds)
        controller = ViewController(
            store=store,
            classifier=HolidayClassifier(table),
            state=ViewState()
        )

        response = asyncio.run(_route(controller, event))

    except ValidationError as e:
        logger.warning(f"Rejected request {method} {path}: {e}")
        response = _response(400, {
            'message': 'Invalid request',
            'error': str(e)
        })

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Request failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _response(500, {
            'message': 'Request failed',
            'error': str(e),
            'error_type': type(e).__name__,
            'duration_seconds': round(duration, 2)
        })

    duration = time.time() - start_time
    logger.info(
        f"Request completed: {method} {path} -> {response['statusCode']} "
        f"in {round(duration, 2)}s"
    )
    return response

"""
Main application routes for the dashboard and civil clock API.
"""
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, redirect, render_template, request, url_for

from autoservice.timezone_utils import (
    CIVIL_TIMEZONE_NAME,
    InvalidFormatError,
    current_civil_instant,
    format_civil_date,
    format_civil_time,
    parse_civil_datetime,
    shift_civil_date,
    week_start,
    week_start_for,
)
from flask_app.services.guard_service import NavigationGuardService

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Redirect root to the dashboard."""
    return redirect(url_for('main.dashboard'))


@main_bp.route('/dashboard')
def dashboard():
    """Display today's civil date and the current service week."""
    now = current_civil_instant()
    this_week = week_start()
    guard_state = NavigationGuardService().get_state()

    return render_template('dashboard.html',
                          now=now,
                          week_start_date=this_week,
                          week_end_date=shift_civil_date(6, start=this_week),
                          guard_state=guard_state)


@main_bp.route('/api/clock')
def api_clock():
    """Return the current civil date, time and week start."""
    now = current_civil_instant()
    return jsonify({
        'date': now.date_str,
        'time': now.time_str,
        'week_start': week_start(),
        'day_of_week': now.day_of_week,
        'timezone': CIVIL_TIMEZONE_NAME,
    })


@main_bp.route('/api/clock/parse', methods=['POST'])
def api_parse_datetime():
    """
    Convert a civil date and time into an absolute instant.

    Accepts form fields or a JSON body with 'date' (YYYY-MM-DD) and
    'time' (HH:MM:SS).

    Returns:
        JSON with the UTC instant and its civil date/time, or 400 on bad input
    """
    payload = request.get_json(silent=True) or request.form
    if not isinstance(payload, dict):
        return jsonify({'error': 'Request body must be an object with date and time.'}), 400

    date_text = payload.get('date')
    time_text = payload.get('time')
    if not date_text or not time_text:
        return jsonify({'error': 'Both date and time are required.'}), 400
    if not isinstance(date_text, str) or not isinstance(time_text, str):
        return jsonify({'error': 'Date and time must be strings.'}), 400

    try:
        instant = parse_civil_datetime(date_text, time_text)
        result = {
            'instant': instant.isoformat(),
            'instant_utc': format_utc(instant),
            'date': format_civil_date(instant),
            'time': format_civil_time(instant),
        }
    except InvalidFormatError as e:
        current_app.logger.info("Rejected civil datetime %r %r: %s", date_text, time_text, e)
        return jsonify({'error': str(e)}), 400
    except OverflowError:
        current_app.logger.info("Civil datetime %r %r out of range", date_text, time_text)
        return jsonify({'error': f"Date '{date_text}' is out of the supported range."}), 400

    return jsonify(result)


@main_bp.route('/api/week-start')
def api_week_start():
    """Return the Monday starting the civil week of ?date= (default: this week)."""
    date_text = request.args.get('date')
    if not date_text:
        return jsonify({'week_start': week_start()})

    try:
        monday = week_start_for(date_text)
    except InvalidFormatError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'date': date_text, 'week_start': monday})


@main_bp.route('/api/date-offset')
def api_date_offset():
    """Return the civil date ?days= away from ?start= (default: today)."""
    days = request.args.get('days', type=int)
    if days is None or days < -3650 or days > 3650:
        return jsonify({'error': 'Invalid day offset. Use -3650 to 3650.'}), 400

    try:
        result = shift_civil_date(days, start=request.args.get('start'))
    except InvalidFormatError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'days': days, 'date': result})


def format_utc(instant: datetime) -> str:
    """Format an aware datetime as an ISO 8601 UTC string with a Z suffix."""
    utc = instant.astimezone(timezone.utc)
    return f"{utc.date().isoformat()}T{utc.strftime('%H:%M:%S')}Z"

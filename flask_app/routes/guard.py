"""
Routes for the unsaved-changes confirmation dialog.
"""
from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for

from autoservice.navigation_guard import PromptChoice
from flask_app.services.guard_service import NavigationGuardService
from flask_app.utils.validators import validate_navigation_target

guard_bp = Blueprint('guard', __name__)


def _back():
    return redirect(request.referrer or url_for('main.dashboard'))


@guard_bp.route('/request', methods=['POST'])
def request_navigation():
    """Leave the current screen, asking first if it holds unsaved changes."""
    target = request.form.get('next', '')
    errors = validate_navigation_target(target)
    if errors:
        for error in errors:
            flash(error, 'error')
        return _back()

    has_unsaved_changes = request.form.get('has_unsaved_changes') in ('1', 'true', 'on')
    service = NavigationGuardService()
    response = service.request_redirect(target.strip(), has_unsaved_changes)
    if response is not None:
        return response

    return render_template('guard/dialog.html', guard_state=service.get_state())


@guard_bp.route('/dialog')
def dialog():
    """Render the confirmation dialog for the session's current guard state."""
    return render_template('guard/dialog.html', guard_state=NavigationGuardService().get_state())


@guard_bp.route('/confirm', methods=['POST'])
def confirm():
    """Leave without saving: run the pending navigation."""
    response = NavigationGuardService().resolve(PromptChoice.CONFIRM)
    if response is None:
        return _back()
    return response


@guard_bp.route('/cancel', methods=['POST'])
def cancel():
    """Stay on the screen and drop the pending navigation."""
    NavigationGuardService().resolve(PromptChoice.CANCEL)
    return _back()


@guard_bp.route('/dismiss', methods=['POST'])
def dismiss():
    """Dialog closed without a choice; treated as cancel."""
    NavigationGuardService().resolve(PromptChoice.DISMISS)
    return _back()


@guard_bp.route('/state', methods=['GET'])
def state():
    """Get current guard state for polling (JSON endpoint)."""
    return jsonify(NavigationGuardService().get_state())

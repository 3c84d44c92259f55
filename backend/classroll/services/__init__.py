"""Service layer.

Blueprints build services through these accessors so configuration (token
lifetimes, suggestion limits, the clock) comes from the running app.
"""
from datetime import date

from flask import current_app

from classroll.services.session_controller import SessionController
from classroll.services.suggestion_service import SuggestionService
from classroll.utils.helpers import utcnow

def clock():
    """Current naive UTC time; tests may replace it via ``app.config['CLOCK']``."""
    return current_app.config.get('CLOCK', utcnow)()

def today() -> date:
    return clock().date()

def session_controller() -> SessionController:
    return SessionController.from_config(
        current_app.config,
        clock=current_app.config.get('CLOCK', utcnow)
    )

def suggestion_service() -> SuggestionService:
    return SuggestionService.from_config(current_app.config)

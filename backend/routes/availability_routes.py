from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import get_scheduling_service
from backend.core.errors import SchedulingError
from backend.routes.errors import database_http_exception, scheduling_http_exception
from backend.scheduling.resolver import SchedulingService
from backend.schemas.availability import (
    AvailabilityRulePatch,
    AvailabilityRuleRequest,
    AvailabilityRuleResponse,
    SlotResponse,
)

router = APIRouter(tags=['availability'])


@router.post(
    '/users/{subject_id}/availability',
    response_model=list[AvailabilityRuleResponse],
    status_code=status.HTTP_201_CREATED,
)
def set_availability(
    subject_id: str,
    rules: list[AvailabilityRuleRequest],
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        saved_rules = service.set_availability(subject_id, rules)
    except SchedulingError as exc:
        raise scheduling_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_http_exception(exc) from exc

    return [AvailabilityRuleResponse.model_validate(rule) for rule in saved_rules]


@router.put('/users/{subject_id}/availability/{rule_id}', response_model=AvailabilityRuleResponse)
def update_availability(
    subject_id: str,
    rule_id: int,
    patch: AvailabilityRulePatch,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        rule = service.update_availability(subject_id, rule_id, patch.changes())
    except SchedulingError as exc:
        raise scheduling_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_http_exception(exc) from exc

    return AvailabilityRuleResponse.model_validate(rule)


@router.get('/users/{subject_id}/availability', response_model=list[AvailabilityRuleResponse])
def list_availability(
    subject_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        rules = service.list_availability(subject_id)
    except SQLAlchemyError as exc:
        raise database_http_exception(exc) from exc

    return [AvailabilityRuleResponse.model_validate(rule) for rule in rules]


@router.get('/users/{subject_id}/slots', response_model=list[SlotResponse])
def get_free_slots(
    subject_id: str,
    from_at: datetime = Query(alias='from'),
    to_at: datetime = Query(alias='to'),
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        slots = service.get_free_slots(subject_id, from_at, to_at)
    except SchedulingError as exc:
        raise scheduling_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_http_exception(exc) from exc

    return [SlotResponse(start_utc=slot.start_at, end_utc=slot.end_at) for slot in slots]

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from .dependencies import get_asset_intake, get_campaign_store, get_payment_provider, get_wizard_sessions
from .models import ContentType, FinalizeMode
from .routes_auth import RequestAuth, get_request_auth, require_auth
from .schemas import (
    AllocationUpdate,
    CampaignRead,
    EstimateRead,
    FieldUpdate,
    FinalizeRequest,
    GuidelineCreate,
    GuidelineUpdate,
    HashtagUpdate,
    RetreatRead,
    StepDetailRead,
    WizardRead,
)
from .services.assets import AssetIntake
from .services.campaign_store import CampaignStore, campaign_to_row
from .services.notify import notify_campaign_submitted
from .services.payment_methods import PaymentMethodProvider
from .services.review import build_review_summary
from .services.wizard import CampaignWizard
from .services.wizard_sessions import WizardSessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/wizard", tags=["wizard"])
AUTH = [Depends(require_auth)]
SessionsDep = Depends(get_wizard_sessions)
ProviderDep = Depends(get_payment_provider)


def _get_wizard(session_id: str, sessions: WizardSessionRegistry) -> CampaignWizard:
    wizard = sessions.get(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Wizard session not found")
    return wizard


async def _ensure_payment_methods(wizard: CampaignWizard, provider: PaymentMethodProvider) -> None:
    """Load the brand's cards once, when the wizard first reaches the payment step."""
    if wizard.needs_payment_methods:
        wizard.offer_payment_methods(await provider.list_payment_methods())


def _read(session_id: str, wizard: CampaignWizard) -> WizardRead:
    draft = wizard.draft
    return WizardRead(
        session_id=session_id,
        current_step=wizard.current_step,
        last_step=wizard.last_step,
        review_ready=wizard.review_ready,
        can_finalize=draft.terms_accepted,
        steps=[
            {
                "index": i,
                "title": step.title,
                "subtitle": step.subtitle,
                "complete": step.is_complete(draft),
            }
            for i, step in enumerate(wizard.steps)
        ],
        draft=draft.to_dict(),
        estimate=wizard.estimate.to_dict(),
        payment_methods=(
            [m.to_dict() for m in wizard.payment_methods] if wizard.payment_methods is not None else None
        ),
    )


@router.post("/sessions", response_model=WizardRead, status_code=status.HTTP_201_CREATED)
async def start_wizard(
    auth: RequestAuth = Depends(get_request_auth),
    sessions: WizardSessionRegistry = SessionsDep,
):
    wizard = CampaignWizard.start(auth)
    session_id = sessions.open(wizard)
    logger.info(f"[wizard] Opened session {session_id[:6]}...")
    return _read(session_id, wizard)


@router.get("/sessions/{session_id}", response_model=WizardRead, dependencies=AUTH)
async def get_wizard(session_id: str, sessions: WizardSessionRegistry = SessionsDep):
    return _read(session_id, _get_wizard(session_id, sessions))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=AUTH)
async def abandon_wizard(session_id: str, sessions: WizardSessionRegistry = SessionsDep):
    if not sessions.close(session_id):
        raise HTTPException(status_code=404, detail="Wizard session not found")
    return None


@router.patch("/sessions/{session_id}/fields", response_model=WizardRead, dependencies=AUTH)
async def update_field(session_id: str, data: FieldUpdate, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    wizard.update_field(data.path, data.value)
    return _read(session_id, wizard)


@router.put("/sessions/{session_id}/hashtags/{content_type}", response_model=WizardRead, dependencies=AUTH)
async def update_hashtag(
    session_id: str,
    content_type: ContentType,
    data: HashtagUpdate,
    sessions: WizardSessionRegistry = SessionsDep,
):
    wizard = _get_wizard(session_id, sessions)
    wizard.update_hashtag(content_type, data.value)
    return _read(session_id, wizard)


@router.put("/sessions/{session_id}/allocation", response_model=WizardRead, dependencies=AUTH)
async def set_allocation(session_id: str, data: AllocationUpdate, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    wizard.set_allocation(data.original)
    return _read(session_id, wizard)


@router.post("/sessions/{session_id}/platforms/{platform}/toggle", response_model=WizardRead, dependencies=AUTH)
async def toggle_platform(session_id: str, platform: str, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    wizard.toggle_platform(platform)
    return _read(session_id, wizard)


@router.post("/sessions/{session_id}/guidelines", response_model=WizardRead, dependencies=AUTH)
async def add_guideline(session_id: str, data: GuidelineCreate, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    wizard.add_guideline(data.text)
    return _read(session_id, wizard)


@router.put("/sessions/{session_id}/guidelines/{index}", response_model=WizardRead, dependencies=AUTH)
async def update_guideline(
    session_id: str,
    index: int,
    data: GuidelineUpdate,
    sessions: WizardSessionRegistry = SessionsDep,
):
    wizard = _get_wizard(session_id, sessions)
    wizard.update_guideline(index, data.text)
    return _read(session_id, wizard)


@router.delete("/sessions/{session_id}/guidelines/{index}", response_model=WizardRead, dependencies=AUTH)
async def remove_guideline(session_id: str, index: int, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    wizard.remove_guideline(index)
    return _read(session_id, wizard)


@router.post("/sessions/{session_id}/assets", response_model=WizardRead, dependencies=AUTH)
async def upload_asset(
    session_id: str,
    file: UploadFile = File(...),
    sessions: WizardSessionRegistry = SessionsDep,
    intake: AssetIntake = Depends(get_asset_intake),
):
    wizard = _get_wizard(session_id, sessions)
    data = await file.read()
    wizard.attach_asset(intake.accept(file.filename or "asset", data, file.content_type))
    return _read(session_id, wizard)


@router.delete("/sessions/{session_id}/assets/{index}", response_model=WizardRead, dependencies=AUTH)
async def remove_asset(session_id: str, index: int, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    wizard.remove_asset(index)
    return _read(session_id, wizard)


@router.post("/sessions/{session_id}/advance", response_model=WizardRead, dependencies=AUTH)
async def advance(
    session_id: str,
    sessions: WizardSessionRegistry = SessionsDep,
    provider: PaymentMethodProvider = ProviderDep,
):
    wizard = _get_wizard(session_id, sessions)
    wizard.advance()
    await _ensure_payment_methods(wizard, provider)
    return _read(session_id, wizard)


@router.post("/sessions/{session_id}/retreat", response_model=RetreatRead, dependencies=AUTH)
async def retreat(session_id: str, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    moved = wizard.retreat()
    return RetreatRead(moved=moved, current_step=wizard.current_step)


@router.get("/sessions/{session_id}/steps/{index}", response_model=StepDetailRead, dependencies=AUTH)
async def get_step(session_id: str, index: int, sessions: WizardSessionRegistry = SessionsDep):
    wizard = _get_wizard(session_id, sessions)
    try:
        failures = wizard.step_failures(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Step not found") from None
    step = wizard.steps[index]
    return StepDetailRead(
        index=index,
        title=step.title,
        subtitle=step.subtitle,
        complete=not failures,
        failures=[f.to_dict() for f in failures],
    )


@router.get("/sessions/{session_id}/estimate", response_model=EstimateRead, dependencies=AUTH)
async def get_estimate(session_id: str, sessions: WizardSessionRegistry = SessionsDep):
    return _get_wizard(session_id, sessions).estimate.to_dict()


@router.get("/sessions/{session_id}/review", dependencies=AUTH)
async def get_review(
    session_id: str,
    sessions: WizardSessionRegistry = SessionsDep,
    provider: PaymentMethodProvider = ProviderDep,
):
    wizard = _get_wizard(session_id, sessions)
    await _ensure_payment_methods(wizard, provider)
    return build_review_summary(wizard.draft, wizard.estimate, wizard.payment_methods)


@router.post("/sessions/{session_id}/finalize", response_model=CampaignRead, status_code=status.HTTP_201_CREATED, dependencies=AUTH)
async def finalize(
    session_id: str,
    data: FinalizeRequest,
    sessions: WizardSessionRegistry = SessionsDep,
    store: CampaignStore = Depends(get_campaign_store),
):
    wizard = _get_wizard(session_id, sessions)
    campaign = await wizard.finalize(data.mode, store)
    sessions.close(session_id)
    if data.mode == FinalizeMode.submit:
        await notify_campaign_submitted(campaign)
    return campaign_to_row(campaign)

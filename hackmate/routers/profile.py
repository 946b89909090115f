from fastapi import APIRouter, Depends, HTTPException, status

from hackmate.routers.dependencies import get_profile_controller
from hackmate.schemas.auth import SignInRequest, SignUpRequest
from hackmate.schemas.profile import ProfileDraftUpdate
from hackmate.schemas.session import AddSkillRequest, ProfileViewState
from hackmate.services.profile_session import ProfileSessionController, SessionStateError


router = APIRouter(prefix="/profile", tags=["profile"])


def _conflict(exc: SessionStateError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("", response_model=ProfileViewState)
async def read_profile_view(controller: ProfileSessionController = Depends(get_profile_controller)) -> ProfileViewState:
    return controller.snapshot()


@router.post("/mode", response_model=ProfileViewState)
async def toggle_auth_mode(controller: ProfileSessionController = Depends(get_profile_controller)) -> ProfileViewState:
    try:
        controller.toggle_auth_mode()
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.post("/sign-in", response_model=ProfileViewState)
async def sign_in(
    payload: SignInRequest,
    controller: ProfileSessionController = Depends(get_profile_controller),
) -> ProfileViewState:
    try:
        await controller.sign_in(payload.email, payload.password)
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.post("/sign-up", response_model=ProfileViewState)
async def sign_up(
    payload: SignUpRequest,
    controller: ProfileSessionController = Depends(get_profile_controller),
) -> ProfileViewState:
    try:
        await controller.sign_up(payload.email, payload.password, payload.username)
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.post("/sign-out", response_model=ProfileViewState)
async def sign_out(controller: ProfileSessionController = Depends(get_profile_controller)) -> ProfileViewState:
    try:
        await controller.sign_out()
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.post("/edit", response_model=ProfileViewState)
async def begin_edit(controller: ProfileSessionController = Depends(get_profile_controller)) -> ProfileViewState:
    try:
        controller.begin_edit()
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.patch("/draft", response_model=ProfileViewState)
async def update_draft(
    update: ProfileDraftUpdate,
    controller: ProfileSessionController = Depends(get_profile_controller),
) -> ProfileViewState:
    try:
        controller.update_draft(**update.model_dump(exclude_unset=True))
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.post("/save", response_model=ProfileViewState)
async def save_profile(controller: ProfileSessionController = Depends(get_profile_controller)) -> ProfileViewState:
    try:
        await controller.save()
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.post("/skills", response_model=ProfileViewState)
async def add_skill(
    payload: AddSkillRequest,
    controller: ProfileSessionController = Depends(get_profile_controller),
) -> ProfileViewState:
    try:
        await controller.add_skill(payload.skill_id)
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.delete("/skills/{skill_id}", response_model=ProfileViewState)
async def remove_skill(
    skill_id: str,
    controller: ProfileSessionController = Depends(get_profile_controller),
) -> ProfileViewState:
    try:
        await controller.remove_skill(skill_id)
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()


@router.put("/skills/selection", response_model=ProfileViewState)
async def select_skill(
    payload: AddSkillRequest,
    controller: ProfileSessionController = Depends(get_profile_controller),
) -> ProfileViewState:
    try:
        controller.select_skill(payload.skill_id)
    except SessionStateError as exc:
        raise _conflict(exc) from exc
    return controller.snapshot()

import logging
from typing import List

from fastapi import APIRouter, HTTPException, status, Path, Body, Response, UploadFile, File

from budget_manager.config import settings
from budget_manager.auth.dependencies import CurrentUserDep
from budget_manager.core.pagination import PaginationParams, set_content_range
from budget_manager.budgets.dependencies import BudgetServiceDep
from budget_manager.budgets.models import (
    BudgetRead, BudgetWrite, BudgetStatusUpdate, BudgetPreview, BudgetSummary, PendingImage
)
from budget_manager.budgets.exceptions import (
    BudgetNotFoundException, BudgetAccessForbiddenException, BudgetValidationException,
    InvalidBudgetStatusException, BudgetSaveInProgressException, NotAuthenticatedException,
    BudgetSaveException, BudgetLoadException,
)
from budget_manager.pdf.dependencies import PDFServiceDep
from budget_manager.pdf.exceptions import PDFGenerationException

logger = logging.getLogger(__name__)

budget_router = APIRouter(
    prefix="/budgets",
    tags=["Budgets"]
)


def handle_budget_service_errors(e: Exception, default_detail: str = settings.BUDGET_LOAD_ERROR_MSG):
    """Traduit les exceptions du domaine Budgets en HTTPException."""
    if isinstance(e, BudgetNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, BudgetAccessForbiddenException):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, (BudgetValidationException, InvalidBudgetStatusException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, BudgetSaveInProgressException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, NotAuthenticatedException):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    if isinstance(e, (BudgetSaveException, BudgetLoadException)):
        # Détail déjà journalisé par le service
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
    if isinstance(e, PDFGenerationException):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=settings.PDF_ERROR_MSG)
    logger.error(f"[Budget API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=default_detail)


@budget_router.get("", response_model=List[BudgetSummary], summary="Lister les budgets (plus récents d'abord)")
async def list_budgets(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    response: Response,
    pagination: PaginationParams,
):
    limit, offset = pagination
    logger.info(f"API list_budgets pour user {current_user.id}: limit={limit}, offset={offset}")
    try:
        result = await service.list_budgets(current_user, limit=limit, offset=offset)
    except Exception as e:
        handle_budget_service_errors(e)
    set_content_range(response, "budgets", offset, len(result.items), result.total)
    return result.items


@budget_router.post("", response_model=BudgetRead, status_code=status.HTTP_201_CREATED, summary="Créer un budget")
async def create_budget(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_in: BudgetWrite,
):
    logger.info(f"API create_budget par user {current_user.id}: client={budget_in.client_id}")
    try:
        return await service.create_budget(budget_in, current_user)
    except Exception as e:
        handle_budget_service_errors(e, settings.BUDGET_SAVE_ERROR_MSG)


@budget_router.post("/preview", response_model=BudgetPreview, summary="Calculer un budget sans l'enregistrer")
async def preview_budget(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_in: BudgetWrite,
):
    try:
        return service.preview(budget_in)
    except Exception as e:
        handle_budget_service_errors(e)


@budget_router.get("/{budget_id}", response_model=BudgetRead, summary="Récupérer un budget complet")
async def get_budget(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
):
    try:
        return await service.get_budget(budget_id, current_user)
    except Exception as e:
        handle_budget_service_errors(e)


@budget_router.put("/{budget_id}", response_model=BudgetRead, summary="Remplacer un budget")
async def update_budget(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
    budget_in: BudgetWrite = Body(...),
):
    logger.info(f"API update_budget par user {current_user.id}: ID={budget_id}")
    try:
        return await service.update_budget(budget_id, budget_in, current_user)
    except Exception as e:
        handle_budget_service_errors(e, settings.BUDGET_SAVE_ERROR_MSG)


@budget_router.patch("/{budget_id}/status", response_model=BudgetRead, summary="Changer le statut d'un budget")
async def update_budget_status(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
    status_in: BudgetStatusUpdate = Body(...),
):
    logger.info(f"API update_budget_status par user {current_user.id}: ID={budget_id}, statut={status_in.status}")
    try:
        return await service.update_status(budget_id, status_in.status, current_user)
    except Exception as e:
        handle_budget_service_errors(e, settings.BUDGET_SAVE_ERROR_MSG)


@budget_router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Supprimer un budget")
async def delete_budget(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
):
    logger.info(f"API delete_budget par user {current_user.id}: ID={budget_id}")
    try:
        await service.delete_budget(budget_id, current_user)
    except Exception as e:
        handle_budget_service_errors(e, settings.BUDGET_SAVE_ERROR_MSG)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@budget_router.post("/{budget_id}/images", response_model=BudgetRead, summary="Ajouter des images à un budget")
async def upload_budget_images(
    service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
    files: List[UploadFile] = File(...),
):
    logger.info(f"API upload_budget_images par user {current_user.id}: ID={budget_id}, {len(files)} fichier(s)")
    images = []
    for upload in files:
        images.append(PendingImage(
            filename=upload.filename or "image",
            content=await upload.read(),
            content_type=upload.content_type,
        ))
    try:
        return await service.add_images(budget_id, images, current_user)
    except Exception as e:
        handle_budget_service_errors(e, settings.BUDGET_SAVE_ERROR_MSG)


@budget_router.get("/{budget_id}/pdf", summary="Télécharger le PDF d'un budget")
async def download_budget_pdf(
    pdf_service: PDFServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
):
    logger.info(f"API download_budget_pdf par user {current_user.id}: ID={budget_id}")
    try:
        pdf_bytes = await pdf_service.generate_budget_pdf(budget_id, current_user)
    except Exception as e:
        handle_budget_service_errors(e, settings.PDF_ERROR_MSG)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="budget-{budget_id}.pdf"'},
    )

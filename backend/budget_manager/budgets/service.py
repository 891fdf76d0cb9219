import logging
from datetime import date
from typing import Callable, List, Optional, Tuple

from budget_manager.config import settings
from budget_manager.budgets.constants import BudgetStatus, LineItemType
from budget_manager.budgets.exceptions import (
    BudgetDomainException, BudgetNotFoundException, BudgetAccessForbiddenException,
    BudgetValidationException, InvalidBudgetStatusException, NotAuthenticatedException,
    BudgetSaveException, BudgetLoadException,
)
from budget_manager.budgets.form import BudgetForm
from budget_manager.budgets.interfaces.repositories import AbstractBudgetRepository
from budget_manager.budgets.models import (
    Budget, BudgetDraft, BudgetFields, BudgetItem, BudgetPreview, BudgetRead, BudgetWrite,
    LineItemRead, PaginatedBudgetSummary, PendingImage, PricingOption,
)
from budget_manager.budgets.pricing import recalculate_tiers
from budget_manager.clients.interfaces.repositories import AbstractClientRepository
from budget_manager.storage.store import AbstractObjectStore
from budget_manager.users.models import UserRead

logger = logging.getLogger(__name__)

_HEADER_FIELDS = frozenset(BudgetFields.model_fields)


class BudgetService:
    """
    Service applicatif des budgets : chargement, enregistrement et calculs.

    L'utilisateur courant est passé explicitement à chaque appel ; un
    utilisateur non admin n'accède qu'à ses propres budgets.
    """

    def __init__(
        self,
        budget_repo: AbstractBudgetRepository,
        client_repo: AbstractClientRepository,
        object_store: AbstractObjectStore,
        today_provider: Callable[[], date] = date.today,
    ):
        self.budget_repo = budget_repo
        self.client_repo = client_repo
        self.object_store = object_store
        self.today_provider = today_provider

    # --- Formulaire ---

    def new_form(self) -> BudgetForm:
        return BudgetForm(today_provider=self.today_provider)

    async def load_form(self, budget_id: int, current_user: UserRead) -> BudgetForm:
        """Reconstruit un formulaire depuis le stockage (lignes séparées par type)."""
        _, form = await self._load(budget_id, current_user)
        return form

    def form_from_payload(self, payload: BudgetWrite, current: Optional[BudgetForm] = None) -> BudgetForm:
        """
        Applique un enregistrement complet reçu par l'API sur un formulaire.

        La date de fin n'est recalculée que si la date de début change ou si
        recompute_end_date est demandé.
        """
        draft = BudgetDraft(
            **payload.model_dump(include={"status", "internal_ref", "client_ref", "collection", "size"}),
            id=current.budget.id if current else None,
            user_id=current.budget.user_id if current else None,
            client_id=payload.client_id,
            project_start_date=current.budget.project_start_date if current else None,
            estimated_end_date=current.budget.estimated_end_date if current else None,
            images=list(current.budget.images) if current else list(payload.images),
        )
        form = BudgetForm(
            budget=draft,
            materials=payload.materials,
            extras=payload.extras,
            pricing_options=current.pricing_options if current else None,
            today_provider=self.today_provider,
        )
        for option in payload.pricing_options or []:
            form.update_pricing_option(option.id, margin_percentage=option.margin_percentage, quantity=option.quantity)
        if payload.recompute_end_date or payload.project_start_date != draft.project_start_date:
            form.set_start_date(payload.project_start_date)
        return form

    # --- Enregistrement ---

    async def save_budget(self, form: BudgetForm, current_user: Optional[UserRead]) -> int:
        """
        Enregistre le formulaire et retourne l'id du budget.

        Les images en attente sont envoyées au stockage puis ajoutées aux images
        déjà enregistrées. Toute erreur technique annule la transaction et est
        remontée sous la forme d'une BudgetSaveException générique ; les images
        déjà envoyées ne sont pas supprimées.
        """
        with form.saving():
            self._validate(form)
            if current_user is None:
                raise NotAuthenticatedException()
            await self._check_client(form.budget.client_id, current_user)

            try:
                budget_id, line_ids, images = await self._persist(form, current_user)
            except BudgetDomainException:
                await self.budget_repo.rollback()
                raise
            except Exception as e:
                logger.error(f"[BudgetService] Échec enregistrement budget {form.budget.id or '(nouveau)'}: {e}", exc_info=True)
                await self.budget_repo.rollback()
                raise BudgetSaveException(budget_id=form.budget.id, detail=settings.BUDGET_SAVE_ERROR_MSG) from e

            self._mark_saved(form, budget_id, current_user, line_ids, images)
            logger.info(f"[BudgetService] Budget ID {budget_id} enregistré par user {current_user.id}.")
            return budget_id

    async def create_budget(self, payload: BudgetWrite, current_user: UserRead) -> BudgetRead:
        form = self.form_from_payload(payload)
        budget_id = await self.save_budget(form, current_user)
        return await self.get_budget(budget_id, current_user)

    async def update_budget(self, budget_id: int, payload: BudgetWrite, current_user: UserRead) -> BudgetRead:
        current = await self.load_form(budget_id, current_user)
        form = self.form_from_payload(payload, current)
        await self.save_budget(form, current_user)
        return await self.get_budget(budget_id, current_user)

    async def add_images(self, budget_id: int, images: List[PendingImage], current_user: UserRead) -> BudgetRead:
        form = await self.load_form(budget_id, current_user)
        for image in images:
            form.add_pending_image(image.filename, image.content, image.content_type)
        await self.save_budget(form, current_user)
        return await self.get_budget(budget_id, current_user)

    # --- Lecture ---

    async def get_budget(self, budget_id: int, current_user: UserRead) -> BudgetRead:
        budget, form = await self._load(budget_id, current_user)
        return BudgetRead(
            **form.budget.model_dump(include=_HEADER_FIELDS),
            id=budget.id,
            client_id=budget.client_id,
            user_id=budget.user_id,
            estimated_end_date=budget.estimated_end_date,
            total_amount=form.total_amount,
            total_lead_days=form.total_lead_days,
            images=list(budget.images or []),
            pricing_options=form.pricing_options,
            materials=[LineItemRead.model_validate(item.model_dump()) for item in form.materials],
            extras=[LineItemRead.model_validate(item.model_dump()) for item in form.extras],
            created_at=budget.created_at,
            updated_at=budget.updated_at,
        )

    async def list_budgets(self, current_user: UserRead, limit: int = 100, offset: int = 0) -> PaginatedBudgetSummary:
        """Liste les budgets, du plus récent au plus ancien (tous pour un admin)."""
        logger.debug(f"[BudgetService] Listage budgets pour user {current_user.id}, limit={limit}, offset={offset}")
        user_filter = None if current_user.is_admin else current_user.id
        items, total = await self.budget_repo.list_budgets(user_id=user_filter, offset=offset, limit=limit)
        return PaginatedBudgetSummary(items=items, total=total)

    def preview(self, payload: BudgetWrite) -> BudgetPreview:
        """Calcule totaux, options de prix et délais sans rien enregistrer."""
        form = self.form_from_payload(payload)
        return BudgetPreview(
            total_amount=form.total_amount,
            total_lead_days=form.total_lead_days,
            project_start_date=form.budget.project_start_date,
            estimated_end_date=form.budget.estimated_end_date,
            materials=form.materials,
            extras=form.extras,
            pricing_options=form.pricing_options,
        )

    # --- Modifications directes ---

    async def update_status(self, budget_id: int, new_status: str, current_user: UserRead) -> BudgetRead:
        try:
            status_value = BudgetStatus(new_status)
        except ValueError:
            raise InvalidBudgetStatusException(new_status, [s.value for s in BudgetStatus])

        budget = await self._get_owned_budget(budget_id, current_user)
        budget.status = status_value
        try:
            await self.budget_repo.upsert_budget(budget=budget)
            await self.budget_repo.commit()
        except Exception as e:
            logger.error(f"[BudgetService] Échec MAJ statut budget {budget_id}: {e}", exc_info=True)
            await self.budget_repo.rollback()
            raise BudgetSaveException(budget_id=budget_id, detail=settings.BUDGET_SAVE_ERROR_MSG) from e
        logger.info(f"[BudgetService] Statut du budget ID {budget_id} -> {status_value.value}.")
        return await self.get_budget(budget_id, current_user)

    async def delete_budget(self, budget_id: int, current_user: UserRead) -> None:
        await self._get_owned_budget(budget_id, current_user)
        try:
            deleted = await self.budget_repo.delete_budget(budget_id=budget_id)
            await self.budget_repo.commit()
        except Exception as e:
            logger.error(f"[BudgetService] Échec suppression budget {budget_id}: {e}", exc_info=True)
            await self.budget_repo.rollback()
            raise BudgetSaveException(budget_id=budget_id, detail=settings.BUDGET_SAVE_ERROR_MSG) from e
        if not deleted:
            raise BudgetNotFoundException(budget_id)
        logger.info(f"[BudgetService] Budget ID {budget_id} supprimé par user {current_user.id}.")

    # --- Interne ---

    async def _get_owned_budget(self, budget_id: int, current_user: UserRead) -> Budget:
        budget = await self.budget_repo.get_budget(budget_id=budget_id)
        if budget is None:
            raise BudgetNotFoundException(budget_id)
        if not current_user.is_admin and budget.user_id != current_user.id:
            logger.warning(f"[BudgetService] Accès refusé budget {budget_id} pour user {current_user.id}.")
            raise BudgetAccessForbiddenException(budget_id)
        return budget

    async def _load(self, budget_id: int, current_user: UserRead) -> Tuple[Budget, BudgetForm]:
        budget = await self._get_owned_budget(budget_id, current_user)
        try:
            items = await self.budget_repo.list_budget_items(budget_id=budget_id)
            draft = BudgetDraft(
                **budget.model_dump(include=_HEADER_FIELDS),
                id=budget.id,
                client_id=budget.client_id,
                user_id=budget.user_id,
                estimated_end_date=budget.estimated_end_date,
                images=list(budget.images or []),
            )
            options = [PricingOption.model_validate(option) for option in budget.pricing_options or []]
            form = BudgetForm(
                budget=draft,
                materials=[item for item in items if item.type == LineItemType.MATERIAL],
                extras=[item for item in items if item.type == LineItemType.EXTRA],
                pricing_options=options or None,
                today_provider=self.today_provider,
            )
        except Exception as e:
            logger.error(f"[BudgetService] Échec chargement budget {budget_id}: {e}", exc_info=True)
            raise BudgetLoadException(budget_id=budget_id, detail=settings.BUDGET_LOAD_ERROR_MSG) from e
        return budget, form

    @staticmethod
    def _validate(form: BudgetForm) -> None:
        errors = []
        if form.budget.client_id is None:
            errors.append("Veuillez sélectionner un client.")
        for label, lines in (("matière", form.materials), ("extra", form.extras)):
            for position, line in enumerate(lines, start=1):
                if not line.description or not line.description.strip():
                    errors.append(f"La description de la ligne {label} {position} est obligatoire.")
        seen_ids = set()
        for line in form.materials + form.extras:
            if line.id is None:
                continue
            if line.id in seen_ids:
                errors.append(f"La ligne ID {line.id} apparaît plusieurs fois.")
            seen_ids.add(line.id)
        if errors:
            raise BudgetValidationException(errors)

    async def _check_client(self, client_id: int, current_user: UserRead) -> None:
        client = await self.client_repo.get(client_id=client_id)
        if client is None or (not current_user.is_admin and client.user_id != current_user.id):
            raise BudgetValidationException([f"Client ID {client_id} introuvable."])

    async def _persist(self, form: BudgetForm, current_user: UserRead) -> Tuple[int, List[int], List[str]]:
        existing = None
        if not form.is_new:
            existing = await self._get_owned_budget(form.budget.id, current_user)

        uploaded = []
        for image in form.pending_images:
            uploaded.append(await self.object_store.upload(image.filename, image.content, image.content_type))
        # Ajout seul : les images déjà enregistrées sont conservées
        persisted = existing.images if existing is not None else form.budget.images
        images = list(persisted or []) + uploaded

        total_amount = form.total_amount
        pricing_snapshot = [
            option.model_dump(mode="json") for option in recalculate_tiers(form.pricing_options, total_amount)
        ]
        values = dict(
            form.budget.model_dump(include=_HEADER_FIELDS),
            client_id=form.budget.client_id,
            estimated_end_date=form.budget.estimated_end_date,
            total_amount=total_amount,
            images=images,
            pricing_options=pricing_snapshot,
        )

        if existing is None:
            budget = Budget(**values, user_id=current_user.id)
        else:
            budget = existing
            for name, value in values.items():
                setattr(budget, name, value)
        budget_id = await self.budget_repo.upsert_budget(budget=budget)

        line_ids = []
        for line in form.materials + form.extras:
            item = BudgetItem(budget_id=budget_id, **line.model_dump())
            line_ids.append(await self.budget_repo.upsert_line_item(item=item))
        if existing is not None:
            await self.budget_repo.delete_line_items(budget_id=budget_id, keep_ids=line_ids)

        await self.budget_repo.commit()
        return budget_id, line_ids, images

    @staticmethod
    def _mark_saved(form: BudgetForm, budget_id: int, current_user: UserRead, line_ids: List[int], images: List[str]) -> None:
        if form.budget.user_id is None:
            form.budget.user_id = current_user.id
        form.budget.id = budget_id
        form.budget.images = images
        form.pending_images.clear()
        material_ids = line_ids[:len(form.materials)]
        extra_ids = line_ids[len(form.materials):]
        form.materials = [line.model_copy(update={"id": line_id}) for line, line_id in zip(form.materials, material_ids)]
        form.extras = [line.model_copy(update={"id": line_id}) for line, line_id in zip(form.extras, extra_ids)]

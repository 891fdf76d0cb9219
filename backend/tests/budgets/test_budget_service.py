from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from budget_manager.budgets.constants import BudgetStatus, LineItemType
from budget_manager.budgets.exceptions import (
    BudgetAccessForbiddenException, BudgetNotFoundException, BudgetSaveException,
    BudgetSaveInProgressException, BudgetValidationException, InvalidBudgetStatusException,
    NotAuthenticatedException,
)
from budget_manager.budgets.models import BudgetItem, BudgetWrite, LineItemWrite, PricingOptionWrite
from budget_manager.budgets.repositories import SQLAlchemyBudgetRepository
from budget_manager.budgets.service import BudgetService
from budget_manager.clients.repositories import SQLAlchemyClientRepository
from budget_manager.users.models import UserRead

MONDAY = date(2024, 1, 1)


@pytest_asyncio.fixture
async def service(db_session, object_store) -> BudgetService:
    return BudgetService(
        budget_repo=SQLAlchemyBudgetRepository(db_session),
        client_repo=SQLAlchemyClientRepository(db_session),
        object_store=object_store,
        today_provider=lambda: MONDAY,
    )


@pytest.fixture
def user(test_user) -> UserRead:
    return UserRead.model_validate(test_user)


@pytest.fixture
def other_user(test_user_2) -> UserRead:
    return UserRead.model_validate(test_user_2)


@pytest.fixture
def admin(admin_user) -> UserRead:
    return UserRead.model_validate(admin_user)


def _filled_form(service, client_id):
    form = service.new_form()
    form.budget.client_id = client_id
    index = form.add_material()
    form.update_material(index, description="Tissu", quantity=Decimal(4), unit_price=Decimal(25), lead_time_days=10)
    extra = form.add_extra()
    form.update_extra(extra, description="Transport", unit_price=Decimal(30))
    form.set_start_date(MONDAY)
    return form


@pytest.mark.asyncio
async def test_end_to_end_save_and_reload(service, user, test_client_record):
    form = _filled_form(service, test_client_record.id)

    budget_id = await service.save_budget(form, user)

    assert form.budget.id == budget_id
    assert all(line.id is not None for line in form.materials + form.extras)
    budget = await service.get_budget(budget_id, user)
    assert budget.status == BudgetStatus.DRAFT
    assert budget.user_id == user.id
    assert budget.total_amount == Decimal(100)
    assert [o.client_price for o in budget.pricing_options] == [Decimal(110), Decimal(115), Decimal(120)]
    assert budget.project_start_date == MONDAY
    assert budget.estimated_end_date == date(2024, 1, 15)
    assert len(budget.materials) == 1 and budget.materials[0].type == LineItemType.MATERIAL
    assert len(budget.extras) == 1 and budget.extras[0].line_cost == Decimal(30)


@pytest.mark.asyncio
async def test_save_requires_client(service, user):
    form = service.new_form()
    with pytest.raises(BudgetValidationException):
        await service.save_budget(form, user)


@pytest.mark.asyncio
async def test_save_requires_line_descriptions(service, user, test_client_record):
    form = service.new_form()
    form.budget.client_id = test_client_record.id
    form.add_material()
    with pytest.raises(BudgetValidationException) as exc_info:
        await service.save_budget(form, user)
    assert len(exc_info.value.errors) == 1


@pytest.mark.asyncio
async def test_save_rejects_duplicate_line_ids(service, user, test_client_record):
    form = _filled_form(service, test_client_record.id)
    budget_id = await service.save_budget(form, user)

    form.extras[0] = form.extras[0].model_copy(update={"id": form.materials[0].id})
    with pytest.raises(BudgetValidationException) as exc_info:
        await service.save_budget(form, user)
    assert len(exc_info.value.errors) == 1

    budget = await service.get_budget(budget_id, user)
    assert len(budget.materials) == 1
    assert len(budget.extras) == 1


@pytest.mark.asyncio
async def test_save_requires_principal(service, test_client_record):
    form = _filled_form(service, test_client_record.id)
    with pytest.raises(NotAuthenticatedException):
        await service.save_budget(form, None)


@pytest.mark.asyncio
async def test_save_rejects_client_of_another_user(service, other_user, test_client_record):
    form = _filled_form(service, test_client_record.id)
    with pytest.raises(BudgetValidationException):
        await service.save_budget(form, other_user)


@pytest.mark.asyncio
async def test_double_submit_is_rejected(service, user, test_client_record):
    form = _filled_form(service, test_client_record.id)
    with form.saving():
        with pytest.raises(BudgetSaveInProgressException):
            await service.save_budget(form, user)
    assert not form.is_saving


@pytest.mark.asyncio
async def test_update_syncs_lines(service, user, test_client_record, db_session):
    form = _filled_form(service, test_client_record.id)
    form.add_material(LineItemWrite(description="Boutons", quantity=Decimal(10), unit_price=Decimal(1)))
    budget_id = await service.save_budget(form, user)
    kept_id = form.materials[0].id
    removed_id = form.materials[1].id

    reloaded = await service.load_form(budget_id, user)
    reloaded.remove_material(1)
    reloaded.update_material(0, quantity=Decimal(5))
    await service.save_budget(reloaded, user)

    items = await SQLAlchemyBudgetRepository(db_session).list_budget_items(budget_id=budget_id)
    ids = [item.id for item in items]
    assert kept_id in ids
    assert removed_id not in ids
    budget = await service.get_budget(budget_id, user)
    assert budget.total_amount == Decimal(125)
    assert budget.materials[0].id == kept_id


@pytest.mark.asyncio
async def test_pending_images_are_appended(service, user, test_client_record, object_store):
    form = _filled_form(service, test_client_record.id)
    form.budget.images = ["http://cdn/existing.png"]
    form.add_pending_image("photo.jpg", b"data", "image/jpeg")
    budget_id = await service.save_budget(form, user)

    budget = await service.get_budget(budget_id, user)
    assert budget.images == ["http://cdn/existing.png", object_store.uploads[0]]
    assert form.pending_images == []


@pytest.mark.asyncio
async def test_update_keeps_persisted_images(service, user, test_client_record, object_store):
    form = _filled_form(service, test_client_record.id)
    form.add_pending_image("a.jpg", b"a")
    budget_id = await service.save_budget(form, user)

    form = await service.load_form(budget_id, user)
    form.budget.images = []
    form.add_pending_image("b.jpg", b"b")
    await service.save_budget(form, user)

    budget = await service.get_budget(budget_id, user)
    assert budget.images == object_store.uploads
    assert len(budget.images) == 2


@pytest.mark.asyncio
async def test_upload_failure_raises_generic_error(service, user, test_client_record, object_store):
    object_store.fail = True
    form = _filled_form(service, test_client_record.id)
    form.add_pending_image("photo.jpg", b"data")
    with pytest.raises(BudgetSaveException):
        await service.save_budget(form, user)
    assert form.budget.id is None
    assert not form.is_saving


@pytest.mark.asyncio
async def test_store_failure_rolls_back(service, user, test_client_record, mocker):
    form = _filled_form(service, test_client_record.id)
    mocker.patch.object(service.budget_repo, "upsert_line_item", side_effect=RuntimeError("db down"))
    rollback = mocker.spy(service.budget_repo, "rollback")
    with pytest.raises(BudgetSaveException):
        await service.save_budget(form, user)
    assert rollback.call_count == 1


@pytest.mark.asyncio
async def test_access_rules(service, user, other_user, admin, test_client_record):
    budget_id = await service.save_budget(_filled_form(service, test_client_record.id), user)
    with pytest.raises(BudgetAccessForbiddenException):
        await service.get_budget(budget_id, other_user)
    assert (await service.get_budget(budget_id, admin)).id == budget_id
    with pytest.raises(BudgetNotFoundException):
        await service.get_budget(9999, user)


@pytest.mark.asyncio
async def test_update_status(service, user, test_client_record):
    budget_id = await service.save_budget(_filled_form(service, test_client_record.id), user)
    budget = await service.update_status(budget_id, "approved", user)
    assert budget.status == BudgetStatus.APPROVED
    with pytest.raises(InvalidBudgetStatusException):
        await service.update_status(budget_id, "archived", user)


@pytest.mark.asyncio
async def test_delete_budget_removes_lines(service, user, test_client_record, db_session):
    budget_id = await service.save_budget(_filled_form(service, test_client_record.id), user)
    await service.delete_budget(budget_id, user)
    with pytest.raises(BudgetNotFoundException):
        await service.get_budget(budget_id, user)
    assert await SQLAlchemyBudgetRepository(db_session).list_budget_items(budget_id=budget_id) == []


@pytest.mark.asyncio
async def test_list_budgets_newest_first(service, user, other_user, test_client_record):
    first = await service.save_budget(_filled_form(service, test_client_record.id), user)
    second = await service.save_budget(_filled_form(service, test_client_record.id), user)
    result = await service.list_budgets(user)
    assert result.total == 2
    assert [b.id for b in result.items] == [second, first]
    assert result.items[0].client_name == "Atelier Dupont"
    assert (await service.list_budgets(other_user)).total == 0


def test_preview_computes_without_saving(service):
    payload = BudgetWrite(
        client_id=1,
        project_start_date=MONDAY,
        materials=[LineItemWrite(description="Tissu", quantity=Decimal(4), unit_price=Decimal(25), lead_time_days=10)],
        pricing_options=[PricingOptionWrite(id=3, margin_percentage=Decimal(50))],
    )
    preview = service.preview(payload)
    assert preview.total_amount == Decimal(100)
    assert preview.estimated_end_date == date(2024, 1, 15)
    assert [o.client_price for o in preview.pricing_options] == [Decimal(110), Decimal(115), Decimal(150)]


@pytest.mark.asyncio
async def test_update_keeps_end_date_when_start_unchanged(service, user, test_client_record):
    created = await service.create_budget(BudgetWrite(
        client_id=test_client_record.id,
        project_start_date=MONDAY,
        materials=[LineItemWrite(description="Tissu", quantity=Decimal(1), unit_price=Decimal(10), lead_time_days=10)],
    ), user)
    assert created.estimated_end_date == date(2024, 1, 15)

    payload = BudgetWrite(
        client_id=test_client_record.id,
        project_start_date=MONDAY,
        materials=[LineItemWrite(id=created.materials[0].id, description="Tissu", quantity=Decimal(1), unit_price=Decimal(10), lead_time_days=1)],
    )
    updated = await service.update_budget(created.id, payload, user)
    assert updated.estimated_end_date == date(2024, 1, 15)

    payload.recompute_end_date = True
    updated = await service.update_budget(created.id, payload, user)
    assert updated.estimated_end_date == date(2024, 1, 2)

import logging
from typing import Optional

from budget_manager.budgets.constants import STATUS_LABELS, UNIT_LABELS
from budget_manager.budgets.models import BudgetRead, LineItemRead
from budget_manager.budgets.service import BudgetService
from budget_manager.clients.interfaces.repositories import AbstractClientRepository
from budget_manager.pdf.generator import AbstractPDFGenerator
from budget_manager.pdf.models import PDFBudgetClient, PDFBudgetData, PDFBudgetLine
from budget_manager.users.models import UserRead

logger = logging.getLogger(__name__)


class BudgetPDFService:
    """Prépare les données résolues d'un budget et délègue le rendu au générateur."""

    def __init__(
        self,
        pdf_generator: AbstractPDFGenerator,
        budget_service: BudgetService,
        client_repo: AbstractClientRepository,
    ):
        self.pdf_generator = pdf_generator
        self.budget_service = budget_service
        self.client_repo = client_repo

    async def generate_budget_pdf(self, budget_id: int, current_user: UserRead, output_path: Optional[str] = None) -> bytes:
        budget = await self.budget_service.get_budget(budget_id, current_user)
        client = await self.client_repo.get(client_id=budget.client_id)
        if client is None:
            logger.warning(f"[PDFService] Client {budget.client_id} introuvable pour budget {budget_id}.")
            pdf_client = PDFBudgetClient()
        else:
            pdf_client = PDFBudgetClient(name=client.name, brand=client.brand, email=client.email)

        data = self.build_pdf_data(budget, pdf_client)
        return await self.pdf_generator.generate_budget_pdf(data, output_path=output_path)

    @staticmethod
    def build_pdf_data(budget: BudgetRead, client: PDFBudgetClient) -> PDFBudgetData:
        def to_line(item: LineItemRead) -> PDFBudgetLine:
            return PDFBudgetLine(
                description=item.description,
                supplier=item.supplier,
                quantity=item.quantity,
                unit_label=UNIT_LABELS.get(item.unit, str(item.unit)),
                unit_price=item.unit_price,
                line_cost=item.line_cost,
                moq_quantity=item.moq_quantity,
                lead_time_days=item.lead_time_days,
            )

        return PDFBudgetData(
            id=budget.id,
            created_at=budget.created_at,
            status_label=STATUS_LABELS.get(budget.status, str(budget.status)),
            client=client,
            internal_ref=budget.internal_ref,
            client_ref=budget.client_ref,
            collection=budget.collection,
            size=budget.size,
            project_start_date=budget.project_start_date,
            estimated_end_date=budget.estimated_end_date,
            total_lead_days=budget.total_lead_days,
            materials=[to_line(item) for item in budget.materials],
            extras=[to_line(item) for item in budget.extras],
            total_amount=budget.total_amount,
            pricing_options=budget.pricing_options,
        )

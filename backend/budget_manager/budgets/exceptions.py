"""Exceptions spécifiques au module Budgets."""

from typing import Optional, List


class BudgetDomainException(Exception):
    """Classe de base pour les exceptions du module Budgets."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class BudgetNotFoundException(BudgetDomainException):
    """Levée lorsqu'un budget spécifique n'est pas trouvé."""
    def __init__(self, budget_id: int):
        super().__init__(f"Budget avec ID {budget_id} non trouvé.")
        self.budget_id = budget_id

class BudgetAccessForbiddenException(BudgetDomainException):
    """Levée lorsqu'un utilisateur accède au budget d'un autre utilisateur."""
    def __init__(self, budget_id: Optional[int] = None):
        super().__init__(f"Accès non autorisé au budget{f' ID {budget_id}' if budget_id else ''}.")
        self.budget_id = budget_id

class BudgetValidationException(BudgetDomainException):
    """Levée lorsqu'un budget ne peut pas être enregistré en l'état (champ requis manquant)."""
    def __init__(self, errors: List[str]):
        super().__init__("Budget invalide: " + " ".join(errors))
        self.errors = errors

class InvalidBudgetStatusException(BudgetDomainException):
    def __init__(self, status: str, allowed: List[str]):
        allowed_str = ", ".join(allowed)
        super().__init__(f"Le statut '{status}' est invalide. Statuts autorisés: {allowed_str}.")
        self.status = status
        self.allowed = allowed

class BudgetSaveInProgressException(BudgetDomainException):
    """Levée lorsqu'un enregistrement est déjà en cours pour ce formulaire."""
    def __init__(self):
        super().__init__("Un enregistrement de ce budget est déjà en cours.")

class NotAuthenticatedException(BudgetDomainException):
    def __init__(self):
        super().__init__("Utilisateur non authentifié.")

class BudgetSaveException(BudgetDomainException):
    """
    Levée pour toute erreur technique pendant l'enregistrement (upload, insertion,
    mise à jour). Le détail est journalisé, l'utilisateur ne voit qu'un message générique.
    """
    def __init__(self, budget_id: Optional[int] = None, detail: str = "Erreur lors de l'enregistrement du budget."):
        super().__init__(detail)
        self.budget_id = budget_id
        self.detail = detail

class BudgetLoadException(BudgetDomainException):
    """Levée en cas d'erreur technique lors du chargement d'un budget."""
    def __init__(self, budget_id: Optional[int] = None, detail: str = "Erreur lors du chargement du budget."):
        super().__init__(detail)
        self.budget_id = budget_id
        self.detail = detail

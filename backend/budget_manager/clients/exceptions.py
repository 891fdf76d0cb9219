"""Exceptions spécifiques au module Clients."""


class ClientDomainException(Exception):
    """Classe de base pour les exceptions du module Clients."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class ClientNotFoundException(ClientDomainException):
    """Levée lorsqu'un client n'est pas trouvé."""
    def __init__(self, client_id: int):
        super().__init__(f"Client avec ID {client_id} non trouvé.")
        self.client_id = client_id

class ClientAccessForbiddenException(ClientDomainException):
    """Levée lorsqu'un utilisateur accède au client d'un autre utilisateur."""
    def __init__(self, client_id: int):
        super().__init__(f"Accès non autorisé au client ID {client_id}.")
        self.client_id = client_id

class ClientInUseException(ClientDomainException):
    """Levée lors de la suppression d'un client encore référencé par des budgets."""
    def __init__(self, client_id: int):
        super().__init__(f"Le client ID {client_id} est référencé par des budgets et ne peut pas être supprimé.")
        self.client_id = client_id

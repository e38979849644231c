"""Fehlerhierarchie des Schuljahres-Syncs.

Alle Fehler werden ohne internes Retry an den Aufrufer weitergereicht; der
nächste periodische Lauf wiederholt den kompletten Abgleich.
"""


class SyncError(Exception):
    """Basisklasse aller Sync-Fehler."""


class UpstreamUnavailable(SyncError):
    """Abruf oder Login beim entfernten System fehlgeschlagen.

    Bricht den Lauf für die betroffene Schule ab.
    """


class AuthenticationFailed(UpstreamUnavailable):
    """Zugangsdaten wurden vom entfernten System abgelehnt."""


class NoConfiguration(SyncError):
    """Für die Schule ist kein passendes Verzeichnissystem konfiguriert."""


class PersistenceFailure(SyncError):
    """Lesen oder Schreiben von Klassen/Kursen fehlgeschlagen.

    Wird nicht abgefangen; bereits verarbeitete Klassen bleiben bestehen.
    """

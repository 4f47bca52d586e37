"""
Console views: job list, job detail and notifications.
"""

from importacoes.views.notifications import Notification, NotificationLevel, Notifier
from importacoes.views.detail_view import DetailResult, ImportacaoDetailView
from importacoes.views.list_view import ImportacaoListView

__all__ = [
    "Notification",
    "NotificationLevel",
    "Notifier",
    "DetailResult",
    "ImportacaoDetailView",
    "ImportacaoListView",
]

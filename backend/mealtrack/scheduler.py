"""
Planificateur APScheduler du tableau des repas.

Deux tâches indépendantes :
- refresh : recharge les inscriptions du jour et le catalogue toutes les
  REFRESH_INTERVAL_SECONDS secondes (nouvelle session à chaque passage)
- tick    : recalcule les états dérivés toutes les STATUS_TICK_SECONDS
  secondes à partir des données déjà chargées, sans accès BDD

Le QueueMonitor appartient à l'appelant (lifespan FastAPI) qui le démarre et
l'arrête ; aucun état global au niveau du module.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from mealtrack.config import settings
from mealtrack.exceptions import PersistenceError
from mealtrack.schemas.registration import BoardResponse
from mealtrack.services import status_service
from mealtrack.store.sql_store import SqlRecordStore

logger = logging.getLogger(__name__)


class QueueMonitor:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        refresh_seconds: Optional[int] = None,
        tick_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session_factory = session_factory
        self.refresh_seconds = refresh_seconds or settings.REFRESH_INTERVAL_SECONDS
        self.tick_seconds = tick_seconds or settings.STATUS_TICK_SECONDS
        self.clock = clock
        self.scheduler = BackgroundScheduler()
        self._lock = threading.Lock()
        self._registrations: List = []
        self._groups: List = []
        self._board: Optional[BoardResponse] = None

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def refresh(self) -> None:
        """Recharge les inscriptions du jour et les groupes, puis recalcule le tableau."""
        db = self.session_factory()
        try:
            store = SqlRecordStore(db, today=self.clock().date())
            registrations = list(store.get_today_registrations())
            groups = list(store.get_all_groups())
            # Détache les objets : ils sont lus hors session par tick()
            db.expunge_all()
        except PersistenceError as exc:
            logger.error("Rechargement des inscriptions impossible : %s", exc.message)
            return
        finally:
            db.close()

        with self._lock:
            self._registrations = registrations
            self._groups = groups
        logger.debug("Tableau rechargé : %d inscription(s), %d groupe(s)", len(registrations), len(groups))
        self.tick()

    def tick(self) -> None:
        """Recalcule les états dérivés avec l'heure courante."""
        with self._lock:
            self._board = status_service.build_board(self._registrations, self._groups, self.clock())

    def snapshot(self) -> Optional[BoardResponse]:
        """Dernier tableau calculé (None avant le premier rechargement)."""
        with self._lock:
            return self._board

    def start(self) -> None:
        """Démarre les deux tâches et effectue un premier rechargement immédiat."""
        self.scheduler.add_job(
            self.refresh,
            trigger="interval",
            seconds=self.refresh_seconds,
            id="registrations_refresh",
            replace_existing=True,
            next_run_time=self.clock(),
        )
        self.scheduler.add_job(
            self.tick,
            trigger="interval",
            seconds=self.tick_seconds,
            id="status_tick",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(
            "Scheduler démarré : rechargement toutes les %ds, statuts toutes les %ds.",
            self.refresh_seconds, self.tick_seconds,
        )

    def stop(self) -> None:
        """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler arrêté.")

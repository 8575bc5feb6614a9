"""Configuration centralisée Celery pour les tâches asynchrones.

Ce module définit la configuration globale de Celery incluant les politiques de retry, timeouts et
limites de connexion au broker.
"""

from __future__ import annotations

# Retries & acks
task_acks_late = True
task_reject_on_worker_lost = True
worker_prefetch_multiplier = 1
task_time_limit = 120  # secondes ; un scan doit finir avant le suivant
broker_pool_limit = 10

# Horodatages en UTC, comme les colonnes en base
enable_utc = True
timezone = "UTC"

# Politique de retry par défaut (à spécialiser par tâche)
max_retries = 3
retry_backoff = True
retry_backoff_max = 60  # secondes

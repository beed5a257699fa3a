"""Live measures -- persisted view of the latest analysis metrics.

Reconciles freshly computed measures for every component of an analysed
project (project -> modules -> directories -> files) against the
`live_measures` table, so that the stored rows always match exactly what the
last analysis reported.

Modules:
  - models: Data classes (Component, Metric, Measure, LiveMeasureRecord)
  - metrics: Core metric catalogue
  - tree: Component tree building and traversal
  - repository: Metric and raw measure repositories
  - filters: Which measures are worth storing
  - projector: Measure -> LiveMeasureRecord conversion
  - db: live_measures.db schema and DAO functions
  - sync: Upsert and delete/insert write strategies
  - step: The persist-live-measures computation step
  - blame: SCM blame ingestion and validation
  - analysis_warnings: User-facing warnings collected during an analysis
  - config: Settings from sync.conf and the environment
"""

from __future__ import annotations

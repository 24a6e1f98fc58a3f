"""
healthmon - HealthCheck Reconciliation Controller

Watches HealthCheck custom resources and keeps one monitoring
Deployment per declared HealthCheck.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- spec: HealthCheck document extraction and validation
- synthesizer: Desired Deployment synthesis
- gateway: Kubernetes control-plane access
- reconciler: Watch subscription and event dispatch
"""

__version__ = "1.0.0"

"""
Desired-state synthesis for HealthCheck monitors.

Every HealthCheck becomes a single-replica Deployment running the
monitor image. The monitor is configured entirely through environment
variables; auth material is added only for the modes the HealthCheck enables.
"""

from dataclasses import dataclass
from typing import List, Optional

from kubernetes.client import (
    V1Container,
    V1Deployment,
    V1DeploymentSpec,
    V1EnvVar,
    V1LabelSelector,
    V1ObjectMeta,
    V1PodSpec,
    V1PodTemplateSpec,
    V1SecretVolumeSource,
    V1Volume,
    V1VolumeMount,
)

from healthmon.modules.spec import HealthCheckSpec

CONTAINER_NAME = "healthcheck"
MTLS_VOLUME_NAME = "mtls-certs"
MTLS_MOUNT_PATH = "/etc/mtls"


@dataclass(frozen=True)
class WorkloadSettings:
    """Deployment-wide settings that do not come from the HealthCheck."""
    image: str = "docker.io/library/healthcheck-monitor:latest"
    image_pull_policy: str = "Never"


def _base_env(spec: HealthCheckSpec) -> List[V1EnvVar]:
    return [
        V1EnvVar(name="HEALTH_ENDPOINT", value=spec.endpoint),
        V1EnvVar(name="HEALTH_INTERVAL", value=str(spec.interval_seconds)),
        V1EnvVar(name="HEALTH_EXPECTEDSTATUS", value=str(spec.expected_status)),
    ]


def synthesize(
    spec: HealthCheckSpec,
    namespace: str,
    name: str,
    settings: Optional[WorkloadSettings] = None,
) -> V1Deployment:
    """
    Build the desired Deployment for one HealthCheck.

    Args:
        spec: Validated HealthCheck spec
        namespace: Namespace of the HealthCheck (and of the Deployment)
        name: Name of the HealthCheck (and of the Deployment)
        settings: Image settings, defaults when omitted

    Returns:
        A fresh V1Deployment; identical inputs give identical output

    Logic:
    1. Base container with endpoint, interval and expected status env vars
    2. mTLS: secret volume, read-only mount, MTLS_CERTS_PATH
    3. OAuth: client id, secret and token URL env vars (plaintext)
    4. One replica, selected and labelled by app=<name>
    """
    settings = settings or WorkloadSettings()
    labels = {"app": name}

    env = _base_env(spec)
    volumes: List[V1Volume] = []
    volume_mounts: List[V1VolumeMount] = []

    if spec.auth.mtls.enabled:
        volumes.append(
            V1Volume(
                name=MTLS_VOLUME_NAME,
                secret=V1SecretVolumeSource(secret_name=spec.auth.mtls.secret_name),
            )
        )
        volume_mounts.append(
            V1VolumeMount(name=MTLS_VOLUME_NAME, mount_path=MTLS_MOUNT_PATH, read_only=True)
        )
        env.append(V1EnvVar(name="MTLS_CERTS_PATH", value=MTLS_MOUNT_PATH))

    # Independent of mTLS; both modes may be active
    if spec.auth.oauth.enabled:
        oauth = spec.auth.oauth
        env.extend(
            [
                V1EnvVar(name="OAUTH_CLIENT_ID", value=oauth.client_id),
                V1EnvVar(name="OAUTH_CLIENT_SECRET", value=oauth.client_secret),
                V1EnvVar(name="OAUTH_TOKEN_URL", value=oauth.token_url),
            ]
        )

    container = V1Container(
        name=CONTAINER_NAME,
        image=settings.image,
        image_pull_policy=settings.image_pull_policy,
        env=env,
        volume_mounts=volume_mounts or None,
    )

    return V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        spec=V1DeploymentSpec(
            replicas=1,
            selector=V1LabelSelector(match_labels=dict(labels)),
            template=V1PodTemplateSpec(
                metadata=V1ObjectMeta(labels=dict(labels)),
                spec=V1PodSpec(containers=[container], volumes=volumes or None),
            ),
        ),
    )

import logging
import threading
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from healthmon.config.provider import ControllerConfig

from .errors import ControlPlaneConnectionError, GatewayError

logger = logging.getLogger(__name__)


class ControlPlaneGateway(Protocol):
    """Protocol for control-plane access - allows swappable implementations."""

    def list(self, namespace: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """
        List HealthCheck documents.

        Returns:
            Tuple of (documents, list resourceVersion)
        """
        ...

    def watch(
        self,
        resource_version: Optional[str],
        namespace: Optional[str] = None,
        timeout_seconds: int = 300,
    ) -> Iterator[Dict[str, Any]]:
        """Stream raw watch events (``{"type": ..., "object": ...}``)."""
        ...

    def stop_watch(self) -> None:
        """Interrupt the active watch stream, if any."""
        ...

    def create_workload(self, namespace: str, definition: client.V1Deployment) -> None:
        ...

    def delete_workload(self, namespace: str, name: str) -> None:
        ...

    def workload_exists(self, namespace: str, name: str) -> bool:
        ...


class KubernetesGateway:
    """Gateway backed by the official Kubernetes client."""

    def __init__(
        self,
        custom_api: client.CustomObjectsApi,
        apps_api: client.AppsV1Api,
        group: str,
        version: str,
        plural: str,
    ):
        """
        Initialize gateway.

        Args:
            custom_api: Client for the HealthCheck custom resource
            apps_api: Client for Deployments
            group: HealthCheck API group
            version: HealthCheck API version
            plural: HealthCheck plural resource name
        """
        self.custom_api = custom_api
        self.apps_api = apps_api
        self.group = group
        self.version = version
        self.plural = plural
        self._watcher: Optional[watch.Watch] = None
        self._watcher_lock = threading.Lock()

    def _list_call(self, namespace: Optional[str]):
        if namespace:
            return self.custom_api.list_namespaced_custom_object, {"namespace": namespace}
        return self.custom_api.list_cluster_custom_object, {}

    def list(self, namespace: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        logger.info(f"Listing {self.plural}")
        func, kwargs = self._list_call(namespace)
        try:
            result = func(group=self.group, version=self.version, plural=self.plural, **kwargs)
        except ApiException as e:
            raise GatewayError.from_api_exception("list", e) from e

        items = result.get("items") or []
        resource_version = (result.get("metadata") or {}).get("resourceVersion")
        return items, resource_version

    def watch(
        self,
        resource_version: Optional[str],
        namespace: Optional[str] = None,
        timeout_seconds: int = 300,
    ) -> Iterator[Dict[str, Any]]:
        logger.info(f"Watching {self.plural} from resourceVersion {resource_version}")
        func, kwargs = self._list_call(namespace)
        if resource_version:
            kwargs["resource_version"] = resource_version

        watcher = watch.Watch()
        with self._watcher_lock:
            self._watcher = watcher
        try:
            yield from watcher.stream(
                func,
                group=self.group,
                version=self.version,
                plural=self.plural,
                timeout_seconds=timeout_seconds,
                allow_watch_bookmarks=True,
                **kwargs,
            )
        except ApiException as e:
            raise GatewayError.from_api_exception("watch", e) from e
        finally:
            watcher.stop()
            with self._watcher_lock:
                if self._watcher is watcher:
                    self._watcher = None

    def stop_watch(self) -> None:
        with self._watcher_lock:
            watcher = self._watcher
        if watcher is not None:
            watcher.stop()

    def create_workload(self, namespace: str, definition: client.V1Deployment) -> None:
        try:
            self.apps_api.create_namespaced_deployment(namespace=namespace, body=definition)
        except ApiException as e:
            raise GatewayError.from_api_exception("create deployment", e) from e

    def delete_workload(self, namespace: str, name: str) -> None:
        try:
            self.apps_api.delete_namespaced_deployment(name=name, namespace=namespace)
        except ApiException as e:
            raise GatewayError.from_api_exception("delete deployment", e) from e

    def workload_exists(self, namespace: str, name: str) -> bool:
        try:
            self.apps_api.read_namespaced_deployment(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                return False
            raise GatewayError.from_api_exception("read deployment", e) from e
        return True


def connect(controller_config: ControllerConfig) -> KubernetesGateway:
    """
    Load credentials and build a gateway.

    In-cluster service account credentials are used unless a kubeconfig
    path is configured.

    Raises:
        ControlPlaneConnectionError: If no usable credentials are found
    """
    try:
        if controller_config.kubeconfig:
            config.load_kube_config(config_file=controller_config.kubeconfig)
            logger.info(f"Loaded Kubernetes config from {controller_config.kubeconfig}")
        else:
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
    except (ConfigException, OSError) as e:
        raise ControlPlaneConnectionError(f"failed to get Kubernetes config: {e}") from e

    api_client = client.ApiClient()
    return KubernetesGateway(
        custom_api=client.CustomObjectsApi(api_client),
        apps_api=client.AppsV1Api(api_client),
        group=controller_config.group,
        version=controller_config.version,
        plural=controller_config.plural,
    )

"""kubectl wrapper for rollout operations."""

import subprocess
from collections.abc import Iterable

from restarter.core.config import format_duration
from restarter.core.exceptions import KubectlError
from restarter.utils.logging import get_logger

logger = get_logger(__name__)


class KubectlWrapper:
    """Wrapper for the kubectl command-line tool."""

    def __init__(
        self,
        kubeconfig_path: str | None = None,
        context: str | None = None,
        namespace: str | None = None,
    ):
        """Initialize kubectl wrapper.

        Args:
            kubeconfig_path: Path to kubeconfig file (optional)
            context: Kubernetes context to use (optional)
            namespace: Namespace to scope commands to (optional)
        """
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        self.namespace = namespace

        logger.debug("kubectl_wrapper_initialized", context=context, namespace=namespace)

    def _run_command(
        self, args: list[str], timeout: float | None = None
    ) -> subprocess.CompletedProcess:
        """Run kubectl command.

        Args:
            args: Command arguments
            timeout: Seconds before the process is killed (optional)

        Returns:
            CompletedProcess instance

        Raises:
            KubectlError: If command fails
        """
        cmd = ["kubectl"] + args

        if self.kubeconfig_path:
            cmd.extend(["--kubeconfig", self.kubeconfig_path])

        if self.context:
            cmd.extend(["--context", self.context])

        if self.namespace:
            cmd.extend(["--namespace", self.namespace])

        logger.debug("running_kubectl_command", command=" ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=timeout,
            )

            logger.debug("kubectl_command_completed", returncode=result.returncode)

            return result

        except subprocess.CalledProcessError as e:
            logger.error(
                "kubectl_command_failed",
                command=" ".join(cmd),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise KubectlError(f"kubectl command failed: {e.stderr or e.stdout}") from e
        except subprocess.TimeoutExpired as e:
            logger.error("kubectl_command_timed_out", command=" ".join(cmd), timeout=timeout)
            raise KubectlError(f"kubectl command timed out after {timeout:g}s") from e
        except FileNotFoundError as e:
            logger.error("kubectl_not_found")
            raise KubectlError("kubectl command not found. Please install kubectl.") from e

    def rollout_restart(self, deployment: str) -> str:
        """Run ``kubectl rollout restart deployment <name>``.

        Returns:
            kubectl output
        """
        result = self._run_command(["rollout", "restart", "deployment", deployment])
        output = result.stdout.strip()

        logger.info("kubectl_rollout_restart_completed", deployment=deployment, output=output)
        return output

    def wait_for_delete(self, pod_identifiers: Iterable[str], timeout: float) -> None:
        """Run ``kubectl wait --for=delete --timeout=<duration> pod/<name> ...``.

        Args:
            pod_identifiers: Resources in ``pod/<name>`` form
            timeout: Seconds kubectl waits before giving up
        """
        pods = list(pod_identifiers)
        args = ["wait", "--for=delete", f"--timeout={format_duration(timeout)}"] + pods

        # kubectl enforces --timeout itself; the margin bounds a hung client
        self._run_command(args, timeout=timeout + 30)

        logger.info("kubectl_wait_completed", pods=pods)

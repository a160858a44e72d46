"""Names, paths and ports shared by load test components."""

from typing import Final

BAZEL_CACHE_VOLUME_NAME: Final = "bazel-cache"
"""Name of the volume that lets images share a bazel cache."""

BAZEL_CACHE_MOUNT_PATH: Final = "/root/.cache/bazel"
"""Directory where the bazel cache resides."""

BIGQUERY_TABLE_ENV: Final = "BQ_RESULT_TABLE"
"""Environment variable naming the table where results are written."""

BUILD_INIT_CONTAINER_NAME: Final = "build"
"""Init container that assembles the binary or bundle needed by the tests."""

CLIENT_ROLE: Final = "client"
"""Value of the role label on a client component."""

CLONE_GIT_REF_ENV: Final = "CLONE_GIT_REF"
"""Environment variable with the commit, tag or branch to check out."""

CLONE_INIT_CONTAINER_NAME: Final = "clone"
"""Init container that obtains a snapshot of the code."""

CLONE_REPO_ENV: Final = "CLONE_REPO"
"""Environment variable with the git repository to clone."""

COMPONENT_NAME_LABEL: Final = "loadtest-component"
"""Label distinguishing test components that share a role."""

DRIVER_ROLE: Final = "driver"
"""Value of the role label on a driver component."""

DRIVER_PORT: Final = 10000
"""Port that servers and clients expose for the driver."""

DRIVER_PORT_ENV: Final = "DRIVER_PORT"
"""Environment variable holding the driver port."""

POOL_LABEL: Final = "pool"
"""Label key whose value is the name of a node pool."""

READY_INIT_CONTAINER_NAME: Final = "ready"
"""Init container that blocks the driver until all workers are ready."""

READY_MOUNT_PATH: Final = "/var/data/qps_workers"
"""Mount path of the ready volume in the ready and driver containers."""

READY_OUTPUT_FILE: Final = READY_MOUNT_PATH + "/addresses"
"""File listing the addresses and ports of ready workers."""

READY_METADATA_OUTPUT_FILE: Final = READY_MOUNT_PATH + "/metadata.json"
"""File where the ready init container writes metadata."""

READY_NODE_INFO_OUTPUT_FILE: Final = READY_MOUNT_PATH + "/node_info.json"
"""File where the ready init container writes node information."""

READY_VOLUME_NAME: Final = "worker-addresses"
"""Volume shared between the ready init container and the driver."""

ROLE_LABEL: Final = "loadtest-role"
"""Label holding the role of a test component."""

RUN_CONTAINER_NAME: Final = "main"
"""Name of the main run container; always first in the list."""

SCENARIOS_FILE_ENV: Final = "SCENARIOS_FILE"
"""Environment variable with the path to the scenarios JSON file."""

SCENARIOS_MOUNT_PATH: Final = "/src/scenarios"
"""Where the scenarios file is mounted in the driver container."""

SERVER_ROLE: Final = "server"
"""Value of the role label on a server component."""

SERVER_PORT: Final = 10010
"""Port the test server listens on."""

WORKSPACE_MOUNT_PATH: Final = "/src/workspace"
"""Mount path of the workspace volume."""

WORKSPACE_VOLUME_NAME: Final = "workspace"
"""Volume shared between init containers and run containers."""

KILL_AFTER_ENV: Final = "KILL_AFTER"
"""Environment variable with the time a pod may take to respond after timeout."""

POD_TIMEOUT_ENV: Final = "POD_TIMEOUT"
"""Environment variable with the timeout for a pod."""

SERVER_UPDATE_PORT: Final = 18005
"""Port on the xDS server that receives configuration (PSM tests)."""

XDS_SERVER_CONTAINER_NAME: Final = "xds-server"
"""Name of the xds-server container (PSM tests)."""

SIDECAR_CONTAINER_NAME: Final = "sidecar"
"""Name of the sidecar container (proxied PSM tests)."""
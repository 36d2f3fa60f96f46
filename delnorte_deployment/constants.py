from pathlib import Path

import delnorte_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(delnorte_deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

PARTIAL_REGISTRY_SUFFIX = ".partial.json"
UNMERGED_REGISTRY_SUFFIX = ".unmerged.json"

#
# Plans
#

PLAN_FILE_SUFFIX = ".yml"
SUPPORTED_PLANS = sorted(p.stem for p in CONSTRUCTOR_PARAMS_DIR.glob(f"*{PLAN_FILE_SUFFIX}"))

#
# Networks
#

LOCAL_NETWORKS = ["local"]

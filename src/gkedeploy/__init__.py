"""
gkedeploy - build, push and roll out Docker images to Google Kubernetes Engine
"""

__version__ = "0.1.0"

from .core import GkeDeployer
from .errors import DeployError

__all__ = ["GkeDeployer", "DeployError"]

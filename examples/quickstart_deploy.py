# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Quickstart: pull the published HelloWorld image and run it on port 9090.

Usage:
    python examples/quickstart_deploy.py [registry-user]

Then open http://localhost:9090 in your browser.
"""

import sys

import hellodeploy


def main() -> None:
    user = sys.argv[1] if len(sys.argv) > 1 else "hellouser"
    target = hellodeploy.DeployTarget(registry_user=user, host_port=9090)

    print(f"Deploying {target.image_ref} ...")
    try:
        report = hellodeploy.deploy(target)
    except hellodeploy.HelloDeployError as exc:
        print(f"Deploy failed: {exc}")
        raise SystemExit(1) from exc

    print(f"Container {report.container_name} is running ({report.container_id[:12]})")
    print()
    print("  Open http://localhost:9090 in your browser")


if __name__ == "__main__":
    main()

"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

AWS = 'provider["registry.terraform.io/hashicorp/aws"]'


def make_state(*resources: dict[str, Any]) -> dict[str, Any]:
    """Wrap resource records in a minimal v4 state document."""
    return {"version": 4, "terraform_version": "1.7.5", "resources": list(resources)}


def make_resource(
    rtype: str,
    name: str,
    *instances: dict[str, Any],
    mode: str = "managed",
    module: str = "",
) -> dict[str, Any]:
    res: dict[str, Any] = {
        "mode": mode,
        "type": rtype,
        "name": name,
        "provider": AWS,
        "instances": list(instances),
    }
    if module:
        res["module"] = module
    return res


@pytest.fixture()
def sample_state() -> dict[str, Any]:
    """A small network stack: VPC, subnets, instances, a module DB and a data source."""
    return {
        "version": 4,
        "terraform_version": "1.7.5",
        "serial": 12,
        "lineage": "3f6b1c2e-8a4d-4f7e-9c1a-2b5d6e7f8a9b",
        "outputs": {},
        "resources": [
            {
                "mode": "data",
                "type": "aws_ami",
                "name": "ubuntu",
                "provider": AWS,
                "instances": [{"schema_version": 0, "attributes": {"id": "ami-123"}}],
            },
            {
                "mode": "managed",
                "type": "aws_vpc",
                "name": "main",
                "provider": AWS,
                "instances": [
                    {
                        "schema_version": 1,
                        "attributes": {"id": "vpc-1", "cidr_block": "10.0.0.0/16"},
                        "sensitive_attributes": [],
                    }
                ],
            },
            {
                "mode": "managed",
                "type": "aws_subnet",
                "name": "private",
                "provider": AWS,
                "instances": [
                    {
                        "index_key": 0,
                        "attributes": {"id": "subnet-0"},
                        "dependencies": ["aws_vpc.main"],
                    },
                    {
                        "index_key": 1,
                        "attributes": {"id": "subnet-1"},
                        "dependencies": ["aws_vpc.main"],
                    },
                ],
            },
            {
                "mode": "managed",
                "type": "aws_instance",
                "name": "web",
                "provider": AWS,
                "instances": [
                    {
                        "index_key": 0,
                        "attributes": {"id": "i-0", "ami": "ami-123"},
                        "dependencies": [
                            "aws_subnet.private",
                            "aws_vpc.main",
                            "data.aws_ami.ubuntu",
                        ],
                    },
                    {
                        "index_key": 1,
                        "attributes": {"id": "i-1", "ami": "ami-123"},
                        "dependencies": [
                            "aws_subnet.private[1]",
                            "aws_vpc.main",
                            "data.aws_ami.ubuntu",
                        ],
                    },
                ],
            },
            {
                "module": "module.db",
                "mode": "managed",
                "type": "aws_db_instance",
                "name": "this",
                "provider": 'module.db.provider["registry.terraform.io/hashicorp/aws"]',
                "instances": [
                    {
                        "attributes": {"id": "db-1", "username": "admin", "password": "hunter2"},
                        "sensitive_attributes": [[{"type": "get_attr", "value": "password"}]],
                        "dependencies": ["aws_subnet.private", "aws_vpc.main"],
                    }
                ],
            },
            {
                "mode": "managed",
                "type": "time_static",
                "name": "created",
                "provider": 'provider["registry.terraform.io/hashicorp/time"]',
                "instances": [
                    {
                        "attributes": {
                            "id": "2024-01-02T03:04:05Z",
                            "rfc3339": "2024-01-02T03:04:05Z",
                        }
                    }
                ],
            },
        ],
    }


@pytest.fixture()
def sample_state_bytes(sample_state: dict[str, Any]) -> bytes:
    return json.dumps(sample_state).encode("utf-8")


@pytest.fixture()
def state_file(tmp_path: Path, sample_state_bytes: bytes) -> Path:
    path = tmp_path / "terraform.tfstate"
    path.write_bytes(sample_state_bytes)
    return path

"""Configuration file schemas for dropletkit."""

YES_NO = {
    "oneOf": [
        {"type": "boolean"},
        {"type": "string", "enum": ["y", "n", "Y", "N"]},
    ]
}

CERTBOT_SECTION_SCHEMA = {
    "type": "object",
    "properties": {
        "server_type": {
            "type": "string",
            "description": "Certbot integration mode",
        },
        "domains": {
            "oneOf": [
                {"type": "string"},
                {
                    "type": "array",
                    "items": {"type": "string", "minLength": 1},
                    "minItems": 1,
                },
            ]
        },
        "email": {"type": "string"},
        "redirect": YES_NO,
        "staging": YES_NO,
        "key_type": {"type": "string"},
        "ec_curve": {"type": "string"},
        "webroot_path": {"type": "string"},
        "hook_services": {
            "type": "array",
            "items": {"type": "string", "pattern": r"^[A-Za-z0-9@._-]+$"},
        },
    },
    "additionalProperties": False,
}

BOOTSTRAP_SECTION_SCHEMA = {
    "type": "object",
    "properties": {
        "node_version": {"type": "string", "pattern": r"^\d+\.\d+\.\d+$"},
        "nvm_version": {"type": "string", "pattern": r"^v\d+\.\d+\.\d+$"},
        "repository": {
            "type": "string",
            "pattern": r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$",
            "description": "GitHub owner/name",
        },
        "github_user": {"type": "string"},
        "clone_dir": {"type": "string"},
        "app_subdir": {"type": "string"},
        "app_port": {"type": "integer", "minimum": 1, "maximum": 65535},
        "postgres_version": {"type": "string"},
        "database": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "pattern": r"^[a-z_][a-z0-9_]*$"},
                "user": {"type": "string", "pattern": r"^[a-z_][a-z0-9_]*$"},
            },
            "additionalProperties": False,
        },
        "pm2_name": {"type": "string"},
    },
    "additionalProperties": False,
}

MAIN_CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "certbot": CERTBOT_SECTION_SCHEMA,
        "bootstrap": BOOTSTRAP_SECTION_SCHEMA,
    },
    "additionalProperties": False,
}

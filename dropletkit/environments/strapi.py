"""Single-droplet bootstrap of a Strapi application."""

import logging
import os
import re
import shlex
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..git.operations import GitOperations, github_https_url
from ..secrets.generator import SecretGenerator
from ..system.firewall import Firewall
from ..system.packages import PackageInstaller
from ..system.services import ServiceManager
from ..utils.commands import CommandRunner
from ..utils.errors import BootstrapError, ConfigurationError, DropletKitError, PreconditionError
from ..utils.templates import TemplateRenderer

logger = logging.getLogger(__name__)

POSTGRES_ETC = "/etc/postgresql"
NVM_INSTALL_URL = "https://raw.githubusercontent.com/nvm-sh/nvm/{version}/install.sh"
USAGE = "Usage: dropletkit bootstrap strapi <DB_PASSWORD> <GITHUB_TOKEN> <DROPLET_NAME> <VPC_IP>"

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


@dataclass(frozen=True)
class StrapiBootstrapOptions:
    """Inputs and layout for a Strapi droplet."""

    db_password: str
    github_token: str
    droplet_name: str
    vpc_ip: str
    node_version: str = "20.5.0"
    nvm_version: str = "v0.39.7"
    repository: str = "khalildaibes/ecommerce-strapi"
    github_user: str = "khalildaibes"
    clone_dir: str = "/root/ecommerce-strapi"
    app_subdir: str = "maisam-makeup-ecommerce-strapi"
    app_port: int = 1337
    db_name: str = "ecommerce_strapi"
    db_user: str = "strapi"
    postgres_version: Optional[str] = None
    pm2_name: str = "strapi-app"
    home_dir: str = "/root"
    nginx_site_path: str = "/etc/nginx/sites-available/website.conf"
    nginx_enabled_dir: str = "/etc/nginx/sites-enabled"

    def __post_init__(self):
        required = (self.db_password, self.github_token, self.droplet_name, self.vpc_ip)
        if not all(required):
            raise ConfigurationError("Missing required bootstrap arguments", details=USAGE)
        for label, value in (("database name", self.db_name), ("database user", self.db_user)):
            if not _IDENTIFIER.match(value):
                raise ConfigurationError(f"Invalid {label}: {value!r}")

    @property
    def app_dir(self) -> str:
        return os.path.join(self.clone_dir, self.app_subdir)

    @property
    def droplet_dir(self) -> str:
        return os.path.join(self.home_dir, self.droplet_name)

    @property
    def nvm_dir(self) -> str:
        return os.path.join(self.home_dir, ".nvm")

    @property
    def repo_url(self) -> str:
        return github_https_url(self.repository, self.github_user, self.github_token)


@dataclass(frozen=True)
class NginxSite:
    """Reverse proxy in front of a local application port."""

    server_name: str
    upstream_port: int
    listen_port: int = 80
    locations: Tuple[str, ...] = ("/", "/api")


@dataclass(frozen=True)
class StrapiEnv:
    """Contents of a Strapi ``.env`` file."""

    host: str
    port: int
    app_keys: List[str]
    api_token_salt: str
    admin_jwt_secret: str
    transfer_token_salt: str
    jwt_secret: str
    database_host: str
    database_name: str
    database_username: str
    database_password: str
    database_port: int = 5432
    database_ssl: bool = False


def quote_sql_literal(value: str) -> str:
    """Quote a string as a PostgreSQL literal."""
    return "'" + value.replace("'", "''") + "'"


def enable_listen_all(postgresql_conf: str) -> str:
    """Make PostgreSQL listen on every interface."""
    return postgresql_conf.replace("#listen_addresses = 'localhost'", "listen_addresses = '*'")


def add_hba_rule(pg_hba: str, rule: str) -> str:
    """Insert ``rule`` after the IPv4 local connections comment, once."""
    lines = pg_hba.splitlines(keepends=True)
    if any(line.strip() == rule for line in lines):
        return pg_hba

    output = []
    for line in lines:
        output.append(line)
        if re.match(r"^#.*IPv4 local connections:", line):
            if not line.endswith("\n"):
                output[-1] = line + "\n"
            output.append(rule + "\n")
    return "".join(output)


class StrapiBootstrap:
    """Provisions PostgreSQL, Node, Nginx and PM2 and starts a Strapi app."""

    def __init__(
        self,
        options: StrapiBootstrapOptions,
        runner: CommandRunner,
        packages: Optional[PackageInstaller] = None,
        services: Optional[ServiceManager] = None,
        firewall: Optional[Firewall] = None,
        git_ops: Optional[GitOperations] = None,
        renderer: Optional[TemplateRenderer] = None,
        secret_generator: Optional[SecretGenerator] = None,
    ):
        self.options = options
        self.runner = runner
        self.packages = packages or PackageInstaller(runner)
        self.services = services or ServiceManager(runner)
        self.firewall = firewall or Firewall(runner)
        self.git_ops = git_ops or GitOperations(dry_run=runner.dry_run)
        self.renderer = renderer or TemplateRenderer()
        self.secret_generator = secret_generator or SecretGenerator()
        self.redact = [options.db_password, options.db_password.replace("'", "''"), options.github_token]

    def steps(self) -> List[Tuple[str, Callable[[], None]]]:
        return [
            ("Updating the system", self.update_system),
            ("Installing Git", self.install_git),
            ("Cloning the Strapi repository", self.clone_repository),
            ("Installing PostgreSQL", self.install_postgresql),
            ("Configuring PostgreSQL", self.configure_database),
            ("Installing Node.js and NPM", self.install_node),
            ("Starting PostgreSQL service", self.start_postgresql),
            ("Installing Strapi globally", self.install_strapi_cli),
            ("Installing PM2", self.install_pm2),
            ("Installing and configuring Nginx", self.configure_nginx),
            ("Configuring .env file for Strapi", self.write_env_file),
            ("Configuring PostgreSQL for external access", self.enable_external_database_access),
            ("Running the final build and starting Strapi", self.build_and_start),
        ]

    def run(self) -> Dict[str, Any]:
        """
        Run every step in order, stopping at the first failure.

        Returns:
            Dict[str, Any]: Bootstrap results

        Raises:
            BootstrapError: If any step fails
        """
        completed = []

        for number, (title, step) in enumerate(self.steps(), 1):
            logger.info(f"Step {number}: {title}...")
            try:
                step()
            except (DropletKitError, OSError) as e:
                details = getattr(e, "details", None) or getattr(e, "message", None) or str(e)
                raise BootstrapError(
                    f"Step {number} ({title}) failed",
                    details=details,
                    suggestions=getattr(e, "suggestions", None),
                ) from e
            completed.append(title)

        logger.info("Strapi setup complete!")
        return {
            "success": True,
            "app_dir": self.options.app_dir,
            "env_file": os.path.join(self.options.app_dir, ".env"),
            "nginx_site": self.options.nginx_site_path,
            "steps_completed": completed,
        }

    # Steps -------------------------------------------------------------

    def update_system(self) -> None:
        self.packages.upgrade()

    def install_git(self) -> None:
        self.packages.install("git")
        self.runner.run(["git", "--version"], capture=False)

    def clone_repository(self) -> None:
        if not self.runner.dry_run:
            os.makedirs(self.options.droplet_dir, exist_ok=True)
        self.git_ops.clone_repository(
            self.options.repo_url,
            self.options.clone_dir,
            redact=self.options.github_token,
        )

    def install_postgresql(self) -> None:
        self.packages.install("postgresql", "postgresql-contrib")

    def configure_database(self) -> None:
        user = self.options.db_user
        db_name = self.options.db_name
        password = quote_sql_literal(self.options.db_password)

        if self._psql_exists(f"SELECT 1 FROM pg_roles WHERE rolname = '{user}'"):
            self._psql(f"ALTER USER {user} WITH PASSWORD {password};")
        else:
            self._psql(f"CREATE USER {user} WITH PASSWORD {password};")
        self._psql(f"ALTER USER {user} WITH SUPERUSER;")

        if not self._psql_exists(f"SELECT 1 FROM pg_database WHERE datname = '{db_name}'"):
            self._psql(f"CREATE DATABASE {db_name} OWNER {user};")

    def install_node(self) -> None:
        if not os.path.isfile(os.path.join(self.options.nvm_dir, "nvm.sh")):
            url = NVM_INSTALL_URL.format(version=self.options.nvm_version)
            self.runner.run(["bash", "-c", f"curl -o- {shlex.quote(url)} | bash"], capture=False)

        self._nvm(["nvm", "install", self.options.node_version], use=False)
        self.packages.install("npm")
        self._nvm(["npm", "install", "-g", "npm"], ["npm", "ci"], cwd=self.options.app_dir)

    def start_postgresql(self) -> None:
        self.services.start("postgresql")

    def install_strapi_cli(self) -> None:
        self._nvm(["npm", "install", "strapi", "-g"])

    def install_pm2(self) -> None:
        self._nvm(["npm", "install", "pm2", "-g"])

    def configure_nginx(self) -> None:
        self.packages.install("nginx")

        site = NginxSite(server_name=self.options.vpc_ip, upstream_port=self.options.app_port)
        self._write_file(self.options.nginx_site_path, self.renderer.render("nginx-site.conf.j2", site=site))

        link = os.path.join(self.options.nginx_enabled_dir, os.path.basename(self.options.nginx_site_path))
        if not self.runner.dry_run and not os.path.lexists(link):
            os.symlink(self.options.nginx_site_path, link)

        self.runner.run(["nginx", "-t"])
        self.services.restart("nginx")

    def build_env(self) -> StrapiEnv:
        secrets = self.secret_generator.generate_strapi_secrets()
        return StrapiEnv(
            host=self.options.vpc_ip,
            port=self.options.app_port,
            database_host=self.options.vpc_ip,
            database_name=self.options.db_name,
            database_username=self.options.db_user,
            database_password=self.options.db_password,
            **secrets,
        )

    def write_env_file(self) -> None:
        content = self.renderer.render("strapi.env.j2", env=self.build_env())
        self._write_file(os.path.join(self.options.app_dir, ".env"), content, mode=0o600)

    def enable_external_database_access(self) -> None:
        rule = f"host    {self.options.db_name}    {self.options.db_user}    {self.options.vpc_ip}/32    md5"

        if self.runner.dry_run:
            logger.info(f"DRY RUN: would set listen_addresses = '*' and add pg_hba rule: {rule}")
        else:
            conf_dir = self.postgres_conf_dir()
            self._edit_file(os.path.join(conf_dir, "postgresql.conf"), enable_listen_all)
            self._edit_file(os.path.join(conf_dir, "pg_hba.conf"), lambda text: add_hba_rule(text, rule))

        if self.firewall.available:
            self.firewall.allow("5432/tcp")
        else:
            logger.warning("ufw not installed; open port 5432 for the VPC manually")

        self.services.restart("postgresql")

    def build_and_start(self) -> None:
        app_dir = self.options.app_dir
        self._nvm(["npm", "ci"], ["npm", "run", "build"], cwd=app_dir)
        self._nvm(["pm2", "start", "npm", "--name", self.options.pm2_name, "--", "run", "start"], cwd=app_dir)
        self._nvm(["pm2", "restart", "all"])

    # Helpers -----------------------------------------------------------

    def postgres_conf_dir(self) -> str:
        """Directory holding postgresql.conf, detecting the version when unset."""
        version = self.options.postgres_version
        if version is None:
            try:
                versions = [name for name in os.listdir(POSTGRES_ETC) if name.replace(".", "").isdigit()]
            except FileNotFoundError:
                versions = []
            if not versions:
                raise PreconditionError(f"No PostgreSQL cluster found under {POSTGRES_ETC}")
            version = max(versions, key=lambda name: [int(part) for part in name.split(".")])
        return os.path.join(POSTGRES_ETC, version, "main")

    def _psql(self, sql: str) -> None:
        self.runner.run(["sudo", "-u", "postgres", "psql", "-c", sql], redact=self.redact)

    def _psql_exists(self, query: str) -> bool:
        if self.runner.dry_run:
            return False
        result = self.runner.run(["sudo", "-u", "postgres", "psql", "-tAc", query], mutable=False, check=False)
        return result.stdout.strip() == "1"

    def _nvm(self, *commands: List[str], cwd: Optional[str] = None, use: bool = True) -> None:
        prelude = f'export NVM_DIR={shlex.quote(self.options.nvm_dir)}; . "$NVM_DIR/nvm.sh"'
        if use:
            prelude += f" && nvm use {shlex.quote(self.options.node_version)} >/dev/null"
        script = " && ".join([prelude] + [shlex.join(command) for command in commands])
        self.runner.run(["bash", "-c", script], cwd=cwd, capture=False)

    def _write_file(self, path: str, content: str, mode: Optional[int] = None) -> None:
        if self.runner.dry_run:
            logger.info(f"DRY RUN: would write {path}")
            return
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        if mode is not None:
            os.chmod(path, mode)

    def _edit_file(self, path: str, transform: Callable[[str], str]) -> None:
        with open(path, encoding="utf-8") as f:
            original = f.read()
        updated = transform(original)
        if updated != original:
            self._write_file(path, updated)

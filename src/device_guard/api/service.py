"""Device Guard Service - wires the core components together for a host.

This is the object a host's login pipeline talks to:

- `enforce_login` is the authentication hook, called after the password
  has been verified.
- `verification` backs the verification page.
- `admin` backs the privileged device management endpoints.
- `bootstrap` is the one-time activation step used by the CLI.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from device_guard.admin.service import DeviceAdminService
from device_guard.common.config import Config, get_config
from device_guard.common.constants import DeviceConstants
from device_guard.core.types import ClientContext, LoginOutcome
from device_guard.data.schemas import Account, DeviceRecord
from device_guard.devices.classifier import classify_user_agent
from device_guard.devices.identity import ClientTokenStore, DeviceIdentityResolver, normalize_text
from device_guard.devices.registry import DeviceRegistry
from device_guard.enforcement.bootstrap import BootstrapApprover
from device_guard.enforcement.engine import LoginEnforcementEngine
from device_guard.enforcement.verification import OTPVerificationFlow
from device_guard.mail import MailService, build_mail_service
from device_guard.otp.challenge import OTPChallengeManager
from device_guard.policy.rules import DevicePolicyRules, load_policy_rules
from device_guard.policy.settings import DevicePolicyService
from device_guard.security.form_tokens import FormTokenSigner
from device_guard.storage import AccountStore, build_account_store

logger = logging.getLogger(__name__)


def load_configured_rules(config: Config) -> DevicePolicyRules:
    """Policy rules from the configured file, the bundled file, or built-in defaults."""
    if config.policy_file is not None:
        return load_policy_rules(config.policy_file)
    bundled = config.resolved_policy_file
    if bundled.exists():
        return load_policy_rules(bundled)
    logger.info("No policy file found, using built-in policy defaults")
    return load_policy_rules(None)


class DeviceGuardService:
    """Composition root for the device allow-list."""

    def __init__(
        self,
        store: Optional[AccountStore] = None,
        mailer: Optional[MailService] = None,
        rules: Optional[DevicePolicyRules] = None,
        config: Optional[Config] = None,
    ):
        """Initialize the service.

        Args:
            store: Account store. Built from config if not provided.
            mailer: Mail backend. Built from config if not provided.
            rules: Policy rules. Loaded from the policy file if not provided.
            config: Configuration. The global config if not provided.
        """
        self.config = config or get_config()
        self.store = store or build_account_store(self.config)
        self.mailer = mailer or build_mail_service(self.config)
        self.rules = rules or load_configured_rules(self.config)

        self.resolver = DeviceIdentityResolver(
            token_max_age=timedelta(days=self.rules.client_token.max_age_days)
        )
        self.registry = DeviceRegistry(self.store)
        self.challenges = OTPChallengeManager(self.store)
        self.policy = DevicePolicyService(self.store, self.rules)
        self.form_tokens = FormTokenSigner(
            self.config.secret_key,
            ttl=timedelta(hours=self.rules.forms.token_ttl_hours),
        )
        self.engine = LoginEnforcementEngine(
            self.registry,
            self.challenges,
            self.mailer,
            verify_path=self.rules.routes.verify_path,
        )
        self.verification = OTPVerificationFlow(
            self.store,
            self.registry,
            self.challenges,
            self.resolver,
            self.form_tokens,
            landing_path=self.rules.routes.landing_path,
        )
        self.admin = DeviceAdminService(
            self.store,
            self.registry,
            self.challenges,
            self.policy,
            self.form_tokens,
        )
        self.bootstrapper = BootstrapApprover(self.store, self.registry, self.resolver)

    @property
    def client_token_name(self) -> str:
        return self.rules.client_token.name

    @staticmethod
    def client_context(user_agent: Optional[str], ip_address: Optional[str]) -> ClientContext:
        """Describe the current client from request metadata."""
        return ClientContext(
            user_agent=normalize_text(user_agent) or DeviceConstants.UNKNOWN,
            ip_address=normalize_text(ip_address) or DeviceConstants.UNKNOWN,
            device_class=classify_user_agent(user_agent),
        )

    def enforce_login(
        self,
        account: Account,
        username: str,
        token_store: ClientTokenStore,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LoginOutcome:
        """Host authentication hook, called once the password checks out."""
        client = self.client_context(user_agent, ip_address)
        device_id = self.resolver.resolve(token_store, user_agent)
        device_limit = self.policy.device_limit()
        outcome = self.engine.enforce(
            account, username, device_id, client, device_limit, now=now
        )
        logger.info(f"Login enforcement for {account.username}: {outcome.action.value}")
        return outcome

    def bootstrap(
        self,
        account: Account,
        token_store: ClientTokenStore,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Optional[DeviceRecord]:
        """One-time activation step: approve the operator's current device."""
        return self.bootstrapper.run(
            account, token_store, self.client_context(user_agent, ip_address)
        )

import logging
from xml.sax.saxutils import escape

import httpx

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.errors import DeliveryError
from oneuptime.notifications.messages import CallRequestMessage, SmsMessage, TwilioConfig

logger = logging.getLogger(__name__)


class _TwilioClient:
    channel = "twilio"

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.transport = transport

    def _resolve_config(self, config: TwilioConfig | None) -> TwilioConfig:
        resolved = config or TwilioConfig.from_settings(self.settings)
        if resolved is None:
            raise DeliveryError(self.channel, "Twilio is not configured.")
        return resolved

    def _post(self, config: TwilioConfig, resource: str, data: dict[str, str]) -> dict:
        url = f"{self.settings.twilio_api_url}/Accounts/{config.account_sid}/{resource}.json"
        try:
            with httpx.Client(
                timeout=self.settings.integration_timeout_seconds,
                transport=self.transport,
            ) as client:
                response = client.post(
                    url,
                    data=data,
                    auth=(config.account_sid, config.auth_token),
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeliveryError(self.channel, str(exc)) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise DeliveryError(self.channel, f"Invalid Twilio response: {exc}") from exc


class SmsService(_TwilioClient):
    channel = "sms"

    def send_sms(self, sms: SmsMessage, twilio_config: TwilioConfig | None = None) -> str:
        if not sms.to:
            raise DeliveryError(self.channel, "Recipient phone number is missing.")

        config = self._resolve_config(twilio_config)
        body = "\n".join(line.strip() for line in sms.message.strip().splitlines())
        result = self._post(
            config,
            "Messages",
            {"To": sms.to, "From": config.phone_number, "Body": body},
        )
        logger.info("Sent SMS to %s", sms.to)
        return str(result.get("sid", ""))


class CallService(_TwilioClient):
    channel = "call"

    def make_call(
        self,
        call_request: CallRequestMessage,
        twilio_config: TwilioConfig | None = None,
    ) -> str:
        if not call_request.to:
            raise DeliveryError(self.channel, "Recipient phone number is missing.")

        config = self._resolve_config(twilio_config)
        says = "".join(f"<Say>{escape(message)}</Say>" for message in call_request.say_messages)
        result = self._post(
            config,
            "Calls",
            {
                "To": call_request.to,
                "From": config.phone_number,
                "Twiml": f"<Response>{says}</Response>",
            },
        )
        logger.info("Placed call to %s", call_request.to)
        return str(result.get("sid", ""))

"""Voice note transcription with OpenAI Whisper."""

from openai import OpenAI, OpenAIError

from ..exceptions import IntegrationError


class Transcriber:
    """Transcribes Telegram voice notes (OGG/Opus) to text."""

    def __init__(self, api_key: str | None = None, model: str = "whisper-1", client: OpenAI | None = None):
        self.model = model
        self.client = client or OpenAI(api_key=api_key)

    def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        try:
            response = self.client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio, "audio/ogg"),
                response_format="text",
            )
        except OpenAIError as e:
            raise IntegrationError("openai_transcription", str(e)) from e
        return response.strip() if isinstance(response, str) else response.text.strip()

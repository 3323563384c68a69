"""Prompt for spoken-delivery evaluation."""

from interview_engine.domain.models.session import VoiceMetadata


def get_voice_evaluation_prompt(transcript: str, metadata: VoiceMetadata) -> str:
    return f"""You are evaluating a candidate's spoken interview answer.

Transcript:
{transcript}

Voice Metadata:
- Duration (seconds): {metadata.duration_seconds:g}
- Filler Word Count: {metadata.filler_word_count}
- Pause Count: {metadata.pause_count}
- Words Per Minute: {metadata.words_per_minute:g}

Evaluate on a 1-10 scale: verbal confidence, fluency and hesitation,
structure of the spoken explanation, professional tone, and overall delivery.

Rules:
- Penalize excessive filler words and frequent long pauses.
- Reward structured spoken explanations.
- Do not judge accent.

Return STRICT JSON:
{{
  "confidence_score": number,
  "fluency_score": number,
  "structure_score": number,
  "professionalism_score": number,
  "spoken_delivery_overall": number,
  "feedback": string[]
}}"""

"""
Capacity Interview

Guided five-step WhatsApp dialogue that collects the inputs of the
repayment capacity calculation from free-text replies.

Flow:
    start_session -> prompt[0]
    process_answer(text) -> RETRY (same prompt) | ACCEPTED (next prompt)
                          | COMPLETED (data + RPC, session cleared)

A step only advances when its answer parses and falls inside the field's
[min, max] range. Invalid answers never raise.
"""
import logging
from typing import Dict, Optional, Tuple

from ...models.assessment import (
    AnswerStatus,
    CapacityAnswerResult,
    CapacityField,
    CapacitySessionState,
    ParserKind,
    RPCResult,
)
from .answer_parsers import parse_answer
from .rpc_calculator import calculate_capacity_score, calculate_rpc, format_rupiah
from .session_store import SessionStore

logger = logging.getLogger(__name__)


# =============================================================================
# INTERVIEW SCHEDULE
# =============================================================================

CAPACITY_SCHEDULE: Tuple[CapacityField, ...] = (
    CapacityField(
        field_name="daily_revenue",
        prompt_text="Berapa rata-rata omset harian usaha Ibu? (contoh: 500 ribu, 1 juta)",
        parser_kind=ParserKind.CURRENCY,
        min_value=10_000,
        max_value=100_000_000,
    ),
    CapacityField(
        field_name="active_days",
        prompt_text="Dalam sebulan, berapa hari Ibu buka usaha? (contoh: 25 hari)",
        parser_kind=ParserKind.DAYS,
        min_value=1,
        max_value=31,
    ),
    CapacityField(
        field_name="cogs_percentage",
        prompt_text="Berapa persen dari omset untuk modal/belanja barang? (contoh: 60%)",
        parser_kind=ParserKind.PERCENTAGE,
        min_value=0,
        max_value=100,
    ),
    CapacityField(
        field_name="household_expenses",
        prompt_text="Berapa pengeluaran rumah tangga per bulan? (listrik, makan, dll)",
        parser_kind=ParserKind.CURRENCY,
        min_value=0,
        max_value=50_000_000,
    ),
    CapacityField(
        field_name="existing_obligations",
        prompt_text="Ada cicilan atau arisan bulanan? Berapa totalnya? (0 jika tidak ada)",
        parser_kind=ParserKind.CURRENCY,
        min_value=0,
        max_value=50_000_000,
    ),
)

# Phrases that should open the capacity interview from free chat
TRIGGERS: Tuple[str, ...] = (
    "kapasitas",
    "kemampuan bayar",
    "bisa pinjam",
    "analisis usaha",
    "hitung kapasitas",
    "cek kapasitas",
    "kemampuan cicilan",
)

# Installments at or above this are considered a good capacity
GOOD_CAPACITY_INSTALLMENT = 500_000

NOT_UNDERSTOOD_PREFIX = "Maaf, saya tidak mengerti."


class CapacityInterview:
    """Runs capacity interview sessions on top of a SessionStore."""

    def __init__(self, store: SessionStore):
        self.store = store

    @staticmethod
    def get_questions() -> Tuple[CapacityField, ...]:
        return CAPACITY_SCHEDULE

    @staticmethod
    def should_trigger(text: Optional[str]) -> bool:
        lower = (text or "").lower()
        return any(trigger in lower for trigger in TRIGGERS)

    def start_session(self, user: str) -> CapacityAnswerResult:
        """Start (or restart) the interview at step 0 and return the first prompt."""
        with self.store.locked(user):
            self.store.create(user, CapacitySessionState())
        first = CAPACITY_SCHEDULE[0]
        return CapacityAnswerResult(
            status=AnswerStatus.ACCEPTED,
            prompt=first.prompt_text,
            field_name=first.field_name,
        )

    def current_question(self, user: str) -> Optional[CapacityField]:
        session = self.store.get(user)
        if session is None or session.state.step >= len(CAPACITY_SCHEDULE):
            return None
        return CAPACITY_SCHEDULE[session.state.step]

    def cancel(self, user: str) -> bool:
        with self.store.locked(user):
            return self.store.delete(user)

    def process_answer(self, user: str, text: Optional[str]) -> CapacityAnswerResult:
        """
        Feed one reply into the user's interview.

        Returns RETRY without advancing when the reply cannot be parsed or is
        out of range, ACCEPTED with the next prompt, or COMPLETED with the
        collected data and RPC result after the fifth field.
        """
        with self.store.locked(user):
            session = self.store.get(user)
            if session is None:
                logger.warning(f"Capacity answer from {user} without an active session")
                return CapacityAnswerResult(status=AnswerStatus.NO_ACTIVE_SESSION)

            state: CapacitySessionState = session.state
            question = CAPACITY_SCHEDULE[state.step]

            value = parse_answer(question.parser_kind, text)
            if value is None:
                logger.warning(f"Unparseable {question.field_name} answer from {user}: {text!r}")
                self.store.touch(user)
                return CapacityAnswerResult(
                    status=AnswerStatus.RETRY,
                    prompt=question.prompt_text,
                    error=f"{NOT_UNDERSTOOD_PREFIX} {question.prompt_text}",
                    field_name=question.field_name,
                    data=dict(state.data),
                )

            if not question.min_value <= value <= question.max_value:
                logger.warning(f"Out of range {question.field_name} answer from {user}: {value}")
                self.store.touch(user)
                return CapacityAnswerResult(
                    status=AnswerStatus.RETRY,
                    prompt=question.prompt_text,
                    error=(
                        f"Angka tidak valid ({format_number(question.min_value)} - "
                        f"{format_number(question.max_value)}). Coba lagi. {question.prompt_text}"
                    ),
                    field_name=question.field_name,
                    value=value,
                    data=dict(state.data),
                )

            data = {**state.data, question.field_name: value}
            step = state.step + 1

            if step >= len(CAPACITY_SCHEDULE):
                self.store.delete(user)
                rpc = calculate_rpc(data)
                logger.info(
                    f"Capacity interview completed for {user}: "
                    f"SDC={rpc.sustainable_disposable_cash}, max_installment={rpc.max_installment}"
                )
                return CapacityAnswerResult(
                    status=AnswerStatus.COMPLETED,
                    field_name=question.field_name,
                    value=value,
                    data=data,
                    rpc=rpc,
                    capacity_score=calculate_capacity_score(rpc),
                    summary=format_rpc_summary(rpc, data),
                )

            self.store.update(user, step=step, data=data)
            next_question = CAPACITY_SCHEDULE[step]
            return CapacityAnswerResult(
                status=AnswerStatus.ACCEPTED,
                prompt=next_question.prompt_text,
                field_name=question.field_name,
                value=value,
                data=data,
            )


# =============================================================================
# FORMATTING
# =============================================================================

def format_number(value: float) -> str:
    """Indonesian thousands separators: 50000000 -> 50.000.000"""
    return f"{int(value):,}".replace(",", ".")


def format_rpc_summary(rpc: RPCResult, data: Dict[str, float]) -> str:
    """WhatsApp-ready summary of a completed capacity interview."""
    if rpc.max_installment >= GOOD_CAPACITY_INSTALLMENT:
        verdict = "✅ Kapasitas baik untuk pengajuan pinjaman!"
    else:
        verdict = "⚠️ Kapasitas terbatas. Tingkatkan omset atau kurangi pengeluaran."

    lines = [
        "📊 *HASIL ANALISIS KAPASITAS*",
        "",
        "💰 *Pendapatan*",
        f"Omset/hari: {format_rupiah(data.get('daily_revenue', 0))}",
        f"Hari aktif: {data.get('active_days')} hari/bulan",
        f"Omset/bulan: {format_rupiah(rpc.monthly_income)}",
        "",
        "💸 *Pengeluaran*",
        f"Modal usaha: {format_rupiah(rpc.cogs)} ({data.get('cogs_percentage')}%)",
        f"Rumah tangga: {format_rupiah(rpc.household_expenses)}",
        f"Cicilan lain: {format_rupiah(rpc.existing_obligations)}",
        f"Total: {format_rupiah(rpc.monthly_expenses)}",
        "",
        "✨ *Kapasitas Bayar*",
        f"Sisa bersih: {format_rupiah(rpc.sustainable_disposable_cash)}",
        f"Kemampuan cicilan: *{format_rupiah(rpc.max_installment)}/bulan*",
        "",
        verdict,
    ]
    return "\n".join(lines)

from __future__ import annotations

from typing import Final

SUPPORTED_LANGUAGES: Final[set[str]] = {"en", "pt"}

MESSAGES: Final[dict[str, dict[str, str]]] = {
    "en": {
        "task_created": "\U0001f4dc Duty '{name}' pinned to the scroll.",
        "task_updated": "\U0001f4dc Duty '{name}' updated.",
        "task_deleted": "\U0001f5d1️ Duty '{name}' removed.",
        "task_completed": "⚔️ Victory! Your discipline was rewarded.",
        "task_failed": "\U0001f480 '{name}' failed. A penance awaits.",
        "task_protected": "The Mantle of Providence shielded you from failure!",
        "task_reset": "↩️ '{name}' is pending again.",
        "task_progress": "\U0001f4c8 '{name}': {progress}/{target} {unit}",
        "habit_created": "\U0001f441️ Now watching '{name}'.",
        "habit_updated": "\U0001f441️ Habit '{name}' updated.",
        "habit_deleted": "\U0001f5d1️ Habit '{name}' removed.",
        "habit_resisted": "\U0001f33f Fortitude shown.",
        "habit_failed": "\U0001f480 You gave in to '{name}'. A penance awaits.",
        "habit_reset": "↩️ '{name}' is pending again.",
        "day_reset": "\U0001f305 A new day: {count} habits are pending again.",
        "quest_created": "\U0001f5e1️ Quest '{name}' begins.",
        "quest_updated": "\U0001f5e1️ Quest '{name}' updated.",
        "quest_deleted": "\U0001f5d1️ Quest '{name}' removed.",
        "quest_completed": "\U0001f3c6 Quest '{name}' completed!",
        "quest_reopened": "↩️ Quest '{name}' reopened.",
        "goal_created": "\U0001f3f9 Pact '{name}' sealed.",
        "goal_updated": "\U0001f3f9 Goal '{name}' updated.",
        "goal_deleted": "\U0001f5d1️ Goal '{name}' removed.",
        "goal_progress": "\U0001f4c8 '{name}': {progress}/{total} {unit}",
        "goal_reached": "\U0001f3f9 Goal reached!",
        "goal_reopened": "↩️ Goal '{name}' reopened.",
        "event_created": "\U0001f4c5 '{name}' scheduled.",
        "event_updated": "\U0001f4c5 '{name}' updated.",
        "event_deleted": "\U0001f5d1️ '{name}' removed.",
        "event_done": "✅ '{name}' done.",
        "event_reopened": "↩️ '{name}' reopened.",
        "penalty_resolved": "⚖️ Penance fulfilled. Honor restored.",
        "penalty_reopened": "⚖️ Penance for '{name}' reopened.",
        "item_saved": "\U0001f528 Item forged successfully!",
        "item_deleted": "\U0001f5d1️ Item removed from the shop.",
        "item_purchased": "✨ {name} acquired!",
        "item_used": "✨ Artifact {name} activated!",
        "class_set": "{icon} You walk the path of the {name}.",
        "class_cleared": "You are unclassed again.",
        "reminder_marked": "\U0001f514 Reminder noted.",
        "screen_set": "",
        "reminder_goal": "{name} ends in {days} days!",
        "reminder_goal_today": "{name} ends today!",
        "reminder_event": "{name} is near! ({days}d)",
        "reminder_event_today": "{name} is today!",
        "err_name_required": "❌ A name is required!",
        "err_penalty_required": "❌ Describe the penance for a failure.",
        "err_negative_cost": "❌ Cost cannot be negative!",
        "err_epic_pending": "❌ Only one epic duty may be pending at a time.",
        "err_target_required": "❌ Progress duties need a positive target.",
        "err_amount_required": "❌ Enter an amount.",
        "err_goal_total": "❌ A goal needs a positive total.",
        "err_unknown_class": "❌ Unknown class '{value}'.",
        "err_unknown_tier": "❌ Unknown difficulty '{value}'.",
        "err_unknown_kind": "❌ Unknown duty type '{value}'.",
        "err_invalid_category": "❌ Unknown item category '{value}'.",
        "err_invalid_effect": "❌ Unknown item effect '{value}'.",
        "err_invalid_date": "❌ Invalid date '{value}'.",
        "err_lead_days": "❌ Reminder lead time cannot be negative.",
        "err_unknown_screen": "❌ Unknown screen '{value}'.",
        "err_insufficient_coins": "❌ Not enough gold: {cost} needed, {coins} available.",
        "err_invalid_transition": "❌ Cannot {action} from '{state}'.",
        "err_failed_task_progress": "❌ Reset the failed duty before logging progress.",
        "noop_missing": "Nothing happened: {what} not found.",
    },
    "pt": {
        "task_created": "\U0001f4dc Dever '{name}' fixado no pergaminho.",
        "task_updated": "\U0001f4dc Dever '{name}' atualizado.",
        "task_deleted": "\U0001f5d1️ Dever '{name}' removido.",
        "task_completed": "⚔️ Vitória! Sua disciplina foi recompensada.",
        "task_failed": "\U0001f480 '{name}' falhou. Uma penitência aguarda.",
        "task_protected": "O Manto da Providência te protegeu da falha!",
        "task_reset": "↩️ '{name}' voltou a ficar pendente.",
        "task_progress": "\U0001f4c8 '{name}': {progress}/{target} {unit}",
        "habit_created": "\U0001f441️ Vigiando '{name}'.",
        "habit_updated": "\U0001f441️ Hábito '{name}' atualizado.",
        "habit_deleted": "\U0001f5d1️ Hábito '{name}' removido.",
        "habit_resisted": "\U0001f33f Fortaleza demonstrada.",
        "habit_failed": "\U0001f480 Você cedeu a '{name}'. Uma penitência aguarda.",
        "habit_reset": "↩️ '{name}' voltou a ficar pendente.",
        "day_reset": "\U0001f305 Novo dia: {count} hábitos pendentes.",
        "quest_created": "\U0001f5e1️ Quest '{name}' iniciada.",
        "quest_updated": "\U0001f5e1️ Quest '{name}' atualizada.",
        "quest_deleted": "\U0001f5d1️ Quest '{name}' removida.",
        "quest_completed": "\U0001f3c6 Quest '{name}' concluída!",
        "quest_reopened": "↩️ Quest '{name}' reaberta.",
        "goal_created": "\U0001f3f9 Acordo '{name}' firmado.",
        "goal_updated": "\U0001f3f9 Meta '{name}' atualizada.",
        "goal_deleted": "\U0001f5d1️ Meta '{name}' removida.",
        "goal_progress": "\U0001f4c8 '{name}': {progress}/{total} {unit}",
        "goal_reached": "\U0001f3f9 Meta atingida!",
        "goal_reopened": "↩️ Meta '{name}' reaberta.",
        "event_created": "\U0001f4c5 '{name}' agendado.",
        "event_updated": "\U0001f4c5 '{name}' atualizado.",
        "event_deleted": "\U0001f5d1️ '{name}' removido.",
        "event_done": "✅ '{name}' finalizado.",
        "event_reopened": "↩️ '{name}' reaberto.",
        "penalty_resolved": "⚖️ Penitência cumprida. Honra restaurada.",
        "penalty_reopened": "⚖️ Processo de '{name}' reaberto.",
        "item_saved": "\U0001f528 Item forjado com sucesso!",
        "item_deleted": "\U0001f5d1️ Item removido da vitrine.",
        "item_purchased": "✨ {name} adquirido!",
        "item_used": "✨ Artefato {name} ativado!",
        "class_set": "{icon} Você segue o caminho do {name}.",
        "class_cleared": "Você voltou a ser um iniciado.",
        "reminder_marked": "\U0001f514 Lembrete registrado.",
        "screen_set": "",
        "reminder_goal": "{name} termina em {days} dias!",
        "reminder_goal_today": "{name} termina hoje!",
        "reminder_event": "{name} está próximo! ({days}d)",
        "reminder_event_today": "{name} é hoje!",
        "err_name_required": "❌ O item precisa de um nome!",
        "err_penalty_required": "❌ Descreva a penitência em caso de falha.",
        "err_negative_cost": "❌ O custo não pode ser negativo!",
        "err_epic_pending": "❌ Apenas um dever épico pode estar pendente.",
        "err_target_required": "❌ Deveres de progresso precisam de um alvo positivo.",
        "err_amount_required": "❌ Informe um valor.",
        "err_goal_total": "❌ A meta precisa de um total positivo.",
        "err_unknown_class": "❌ Classe desconhecida '{value}'.",
        "err_unknown_tier": "❌ Dificuldade desconhecida '{value}'.",
        "err_unknown_kind": "❌ Tipo de dever desconhecido '{value}'.",
        "err_invalid_category": "❌ Categoria de item desconhecida '{value}'.",
        "err_invalid_effect": "❌ Efeito de item desconhecido '{value}'.",
        "err_invalid_date": "❌ Data inválida '{value}'.",
        "err_lead_days": "❌ A antecedência do lembrete não pode ser negativa.",
        "err_unknown_screen": "❌ Tela desconhecida '{value}'.",
        "err_insufficient_coins": "❌ Ouro insuficiente: {cost} necessário, {coins} disponível.",
        "err_invalid_transition": "❌ Não é possível {action} a partir de '{state}'.",
        "err_failed_task_progress": "❌ Reinicie o dever falhado antes de registrar progresso.",
        "noop_missing": "Nada aconteceu: {what} não encontrado.",
    },
}


def normalize_language_code(raw: str | None, default: str = "en") -> str:
    value = (raw or "").strip().lower()
    if value.startswith("pt"):
        return "pt"
    if value.startswith("en"):
        return "en"
    return default if default in SUPPORTED_LANGUAGES else "en"


def t(key: str, lang: str = "en", **kwargs: object) -> str:
    code = normalize_language_code(lang, default="en")
    template = MESSAGES.get(code, {}).get(key)
    if template is None:
        template = MESSAGES["en"].get(key, key)
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return template

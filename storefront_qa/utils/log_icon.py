icon = {
    "running": "🏃",
    "success": "✅",
    "failure": "❌",
    "warning": "⚠️",
    "cancelled": "🚫",
    "cart": "🛒",
    "report": "📄",
}

icon = {
    "running": "🏃",
    "success": "✅",
    "failed": "❌",
    "warning": "⚠️",
    "page": "📄",
    "condition": "🔀",
    "terminal": "🏁",
    "repeat": "🔁",
    "skip": "⏭️",
}

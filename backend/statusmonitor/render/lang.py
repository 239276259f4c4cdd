"""UI strings for the generated pages."""
from typing import Dict

STRINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "statusMonitor": "Status Monitor",
        "lastUpdate": "Last update",
        "summary": "Summary",
        "operationalServices": "services operational",
        "services": "Services",
        "service": "Service",
        "status": "Status",
        "time": "Time",
        "trend": "Trend",
        "lastCheck": "Last check",
        "up": "UP",
        "down": "DOWN",
        "maintenance": "MAINTENANCE",
        "unknown": "UNKNOWN",
        "backToDashboard": "← Back to dashboard",
        "currentState": "Current state",
        "responseTime": "Response time",
        "lastVerification": "Last verification",
        "statistics": "Statistics",
        "uptime": "Uptime",
        "avgResponseTime": "Average response time",
        "incidents": "Incidents",
        "latestChecks": "Latest checks",
        "date": "Date",
        "error": "Error",
        "recentIncidents": "Recent incidents",
        "jsonData": "JSON data",
        "currentStatus": "Current status",
        "fullHistory": "Full history",
        "checks": "checks",
        "history": "History",
        "latency": "Latency (ms)",
        "badge": "Badge",
        "reportIssue": "Report an issue",
        "notPersisted": "This result could not be saved; stored history may be stale.",
        "ago": "{value}{unit} ago",
        "unknownError": "unknown",
    },
    "es": {
        "statusMonitor": "Monitor de Estado",
        "lastUpdate": "Última actualización",
        "summary": "Resumen",
        "operationalServices": "servicios operativos",
        "services": "Servicios",
        "service": "Servicio",
        "status": "Estado",
        "time": "Tiempo",
        "trend": "Tendencia",
        "lastCheck": "Última comprobación",
        "up": "ACTIVO",
        "down": "CAÍDO",
        "maintenance": "MANTENIMIENTO",
        "unknown": "DESCONOCIDO",
        "backToDashboard": "← Volver al panel",
        "currentState": "Estado actual",
        "responseTime": "Tiempo de respuesta",
        "lastVerification": "Última verificación",
        "statistics": "Estadísticas",
        "uptime": "Disponibilidad",
        "avgResponseTime": "Tiempo de respuesta promedio",
        "incidents": "Incidentes",
        "latestChecks": "Últimas verificaciones",
        "date": "Fecha",
        "error": "Error",
        "recentIncidents": "Incidentes recientes",
        "jsonData": "Datos JSON",
        "currentStatus": "Estado actual",
        "fullHistory": "Historial completo",
        "checks": "comprobaciones",
        "history": "Historial",
        "latency": "Latencia (ms)",
        "badge": "Insignia",
        "reportIssue": "Reportar un problema",
        "notPersisted": "Este resultado no se pudo guardar; el historial almacenado puede estar desactualizado.",
        "ago": "hace {value}{unit}",
        "unknownError": "desconocido",
    },
}


def get_strings(language: str) -> Dict[str, str]:
    return STRINGS.get(language, STRINGS["en"])

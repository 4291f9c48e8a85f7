"""Repair appointment confirmation email content"""

from html import escape
from typing import Dict

from storefront_gateway.domain.models import EmailContent, RepairAppointment

DEFAULT_LOCALE = "en"

_STRINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "subject": "Repair Appointment Confirmation #{id}",
        "heading": "Repair Appointment Confirmation",
        "greeting": "Hello {name},",
        "intro": (
            "Thank you for scheduling a repair with us. We have received your request "
            "and are ready to help with your device."
        ),
        "appointment_id": "Appointment ID",
        "date": "Date",
        "time": "Time",
        "device": "Device",
        "services": "Repair Services",
        "instructions": (
            "Please bring your device to our store at the scheduled date and time. "
            "Our team will be waiting for you."
        ),
        "check_status": "Check Repair Status",
        "closing": "If you need to make any changes to your appointment, please contact us as soon as possible.",
        "regards": "Best regards",
    },
    "es": {
        "subject": "Confirmación de reparación #{id}",
        "heading": "Confirmación de Reparación",
        "greeting": "Hola {name},",
        "intro": (
            "Gracias por programar una reparación con nosotros. Hemos recibido su solicitud "
            "y estamos listos para ayudarle con su dispositivo."
        ),
        "appointment_id": "ID de la cita",
        "date": "Fecha",
        "time": "Hora",
        "device": "Dispositivo",
        "services": "Servicios de reparación",
        "instructions": (
            "Por favor traiga su dispositivo a nuestra tienda en la fecha y hora programadas. "
            "Nuestro equipo lo estará esperando."
        ),
        "check_status": "Verificar Estado de Reparación",
        "closing": "Si necesita hacer algún cambio en su cita, contáctenos lo antes posible.",
        "regards": "Saludos cordiales",
    },
}


def status_check_link(base_url: str, locale: str, appointment_id: int) -> str:
    return f"{base_url.rstrip('/')}/{locale}/repair/status?id={appointment_id}"


def build_repair_confirmation(appointment: RepairAppointment, status_link: str, locale: str = DEFAULT_LOCALE) -> EmailContent:
    """
    Render subject, HTML and plain-text bodies for a new appointment.

    Unknown locales fall back to English. Customer-supplied values are
    HTML-escaped in the HTML body.
    """
    strings = _STRINGS.get(locale, _STRINGS[DEFAULT_LOCALE])

    when = appointment.appointment_date
    formatted_date = f"{when:%B} {when.day}, {when.year}"
    formatted_time = when.strftime("%I:%M %p").lstrip("0")
    device = appointment.device.display_name()
    repairs = [item.display_name() for item in appointment.items]

    subject = strings["subject"].format(id=appointment.id)
    greeting = strings["greeting"].format(name=appointment.customer_name)

    repairs_html = "".join(f"<li>{escape(r)}</li>" for r in repairs)
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>{strings["heading"]}</h2>
      <p>{escape(greeting)}</p>
      <p>{strings["intro"]}</p>
      <div style="background-color: #f5f5f5; border-radius: 5px; padding: 15px; margin: 20px 0;">
        <p><strong>{strings["appointment_id"]}:</strong> #{appointment.id}</p>
        <p><strong>{strings["date"]}:</strong> {formatted_date}</p>
        <p><strong>{strings["time"]}:</strong> {formatted_time}</p>
        <p><strong>{strings["device"]}:</strong> {escape(device)}</p>
        <p><strong>{strings["services"]}:</strong></p>
        <ul>{repairs_html}</ul>
      </div>
      <p>{strings["instructions"]}</p>
      <p><a href="{escape(status_link)}">{strings["check_status"]}</a></p>
      <p>{strings["closing"]}</p>
      <p>{strings["regards"]}</p>
    </div>
    """

    repairs_text = "\n".join(f"- {r}" for r in repairs)
    text = (
        f"{strings['heading']}\n\n"
        f"{greeting}\n\n"
        f"{strings['intro']}\n\n"
        f"{strings['appointment_id']}: #{appointment.id}\n"
        f"{strings['date']}: {formatted_date}\n"
        f"{strings['time']}: {formatted_time}\n"
        f"{strings['device']}: {device}\n"
        f"{strings['services']}:\n{repairs_text}\n\n"
        f"{strings['instructions']}\n\n"
        f"{strings['check_status']}: {status_link}\n\n"
        f"{strings['closing']}\n\n"
        f"{strings['regards']}"
    )

    return EmailContent(subject=subject, html=html, text=text)

"""
The browser client served by the facade at /cliente.

A single text box and button. The command is sent with XMLHttpRequest to
the facade's /consulta endpoint and the raw response text is shown as is.
"""

from string import Template


PAGE_TITLE = "Reflective ChatGPT"

_PAGE = Template(
    "<!DOCTYPE html>"
    "<html><head><meta charset=\"UTF-8\"><title>$title</title>"
    "<style>body{font-family:Arial,Helvetica,sans-serif;margin:20px}"
    "#out{white-space:pre-wrap;border:1px solid #ccc;padding:10px;border-radius:6px}</style>"
    "</head><body>"
    "<h1>$title</h1>"
    "<p>Comandos: Class(...), invoke(...), unaryInvoke(...), binaryInvoke(...)</p>"
    "<input id=\"cmd\" style=\"width:80%\" placeholder=\"$placeholder\">"
    "<button onclick=\"send()\">Enviar</button>"
    "<pre id=\"out\"></pre>"
    "<script>function send(){"
    "var c=document.getElementById('cmd').value;"
    "var x=new XMLHttpRequest();"
    "x.onload=function(){document.getElementById('out').textContent=this.responseText;};"
    "x.open('GET','$endpoint?comando='+encodeURIComponent(c));"
    "x.send();}</script>"
    "</body></html>"
)


def render_client_page(endpoint: str = "/consulta", placeholder: str = "Class(math)") -> str:
    """HTML of the client page, posting commands to endpoint."""
    return _PAGE.substitute(title=PAGE_TITLE, endpoint=endpoint, placeholder=placeholder)


CLIENT_PAGE = render_client_page()

"""Host name and fully qualified domain name."""

import socket


@hostfacts.plugin("Hostname", provides=["hostname", "fqdn", "domain"])
class Hostname:
    @hostfacts.collect_data()
    def collect_default(self):
        fqdn = socket.getfqdn()
        self.data["hostname"] = socket.gethostname().split(".")[0]
        self.data["fqdn"] = fqdn
        if "." in fqdn:
            self.data["domain"] = fqdn.split(".", 1)[1]

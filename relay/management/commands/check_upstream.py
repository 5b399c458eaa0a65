from django.core.management.base import BaseCommand, CommandError

from relay.config import UpstreamConfig
from relay.services.auth import login
from relay.services.cases import fetch_cases
from relay.services.doctors import list_doctors
from relay.services.upstream import UpstreamClient


class Command(BaseCommand):
    help = "Log in to the upstream MediBill API and report doctor/case counts for the configured endpoint paths."

    def add_arguments(self, parser):
        parser.add_argument('--doctor', action='append', dest='doctors', default=[],
                            help='Doctor account number to fetch cases for (repeatable). Defaults to every doctor.')
        parser.add_argument('--workers', type=int, default=None, help='Concurrent per-doctor case requests.')

    def handle(self, *args, **options):
        config = UpstreamConfig.from_settings()
        self.stdout.write(f"Upstream: {config.base_url or '(not set)'}")

        auth = login(config)
        if not auth.success:
            raise CommandError(f"Login failed ({auth.status_code}): {auth.error.message}")
        token = auth.value.token
        self.stdout.write(self.style.SUCCESS(f"Login ok, token {token[:10]}..."))

        with UpstreamClient(config, token=token) as client:
            doctors = list_doctors(client)
            if not doctors.success:
                raise CommandError(f"Doctors fetch failed ({doctors.status_code}): {doctors.error.message}")
            self.stdout.write(self.style.SUCCESS(f"Doctors: {len(doctors.value)} ({config.doctors_path})"))

            acc_nos = options['doctors'] or [d['id'] for d in doctors.value if d['id']]
            cases = fetch_cases(client, acc_nos, workers=options['workers'])
        if not cases.success:
            raise CommandError(f"Cases fetch failed ({cases.status_code}): {cases.error.message}")
        counts = {}
        for case in cases.value:
            counts[case['status']] = counts.get(case['status'], 0) + 1
        summary = ', '.join(f"{k}={v}" for k, v in sorted(counts.items())) or 'none'
        if acc_nos:
            scope = f"for {len(acc_nos)} doctors ({config.doctor_cases_path})"
        else:
            # fetch_cases falls back to the all-cases endpoint
            scope = f"from all cases ({config.cases_path})"
        self.stdout.write(self.style.SUCCESS(f"Cases: {len(cases.value)} {scope} [{summary}]"))

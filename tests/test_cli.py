import json

import pytest

from cli import main
from ingest.jira import JiraAuthError
from models import UserInfo


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'jiratime.json'
    path.write_text(json.dumps({'baseurl': 'https://example.atlassian.net', 'username': 'me@example.com', 'userkey': 'k', 'workers': 4}), encoding='utf-8')
    return str(path)


@pytest.fixture
def jira(make_jira, wl):
    them = UserInfo('them-id', 'them@example.com', 'Them', 'America/New_York')
    return make_jira(
        worklogs={
            '1': [
                wl('them-id', '2024-01-01T09:00:00.000-0500', 3600),
                wl('them-id', '2024-01-02T23:30:00.000-0500', 1800),
                wl('them-id', '2024-01-03T00:00:00.000-0500', 900),
                wl('caller-id', '2024-01-01T09:00:00.000+0000', 7200),
            ],
        },
        users={'them@example.com': them},
    )


def factory_for(client, seen=None):
    def factory(base_url, username, token):
        if seen is not None:
            seen.append((base_url, username, token))
        return client
    return factory


def test_reports_target_user_in_their_timezone(config_file, jira, capsys):
    seen = []
    argv = ['--config', config_file, '--user', 'them@example.com', '--start', '2024-01-01', '--end', '2024-01-02', '--format', 'json']
    assert main(argv, client_factory=factory_for(jira, seen)) == 0
    out = json.loads(capsys.readouterr().out)
    # 23:30 on the last day counts, midnight after it does not
    assert out['totalSeconds'] == 5400
    assert out['hours'] == 1 and out['minutes'] == 30
    assert out['start'] == '2024-01-01'
    # dates echo in the caller's UTC: midnight in New York is 05:00 UTC
    assert out['end'] == '2024-01-03'
    assert out['user'] == {'emailAddress': 'them@example.com', 'displayName': 'Them', 'timeZone': 'America/New_York'}
    assert seen == [('https://example.atlassian.net/rest/api/3', 'me@example.com', 'k')]
    assert jira.closed


def test_defaults_to_caller_with_open_window(config_file, jira, capsys):
    assert main(['--config', config_file, '--format', 'csv'], client_factory=factory_for(jira)) == 0
    assert capsys.readouterr().out.strip() == 'Me,me@example.com,,,UTC,2,0,7200'
    assert jira.jql == ['worklogAuthor = "caller-id"']


def test_bad_dates_exit_nonzero_without_output(config_file, jira, capsys):
    assert main(['--config', config_file, '--start', '2024-02-30', '--end', 'soon'], client_factory=factory_for(jira)) == 1
    assert capsys.readouterr().out == ''
    assert jira.worklog_calls == []


def test_auth_failure_before_pipeline(config_file, make_jira, capsys):
    class Rejected(make_jira):
        def myself(self):
            raise JiraAuthError("Jira rejected credentials for me@example.com (401)", status=401)

    client = Rejected()
    assert main(['--config', config_file], client_factory=factory_for(client)) == 1
    assert client.jql == []
    assert capsys.readouterr().out == ''


def test_fatal_fetch_error_prints_no_partial_report(config_file, make_jira, wl, capsys):
    client = make_jira(worklogs={'1': [wl('caller-id', '2024-01-01T00:00:00.000+0000', 1)], '2': []}, fail_issues={'2'})
    assert main(['--config', config_file, '--workers', '2'], client_factory=factory_for(client)) == 1
    assert capsys.readouterr().out == ''


def test_missing_config(tmp_path, jira):
    assert main(['--config', str(tmp_path / 'nope.json')], client_factory=factory_for(jira)) == 1


def test_rejects_non_positive_workers(config_file, jira):
    with pytest.raises(SystemExit):
        main(['--config', config_file, '--workers', '0'], client_factory=factory_for(jira))

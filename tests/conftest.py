"""Shared fixtures for documentation mapping tests."""

from __future__ import annotations

import pytest

SOURCE_URL = "https://learn.microsoft.com/en-us/azure/azure-monitor/reference/tables-category"

SAMPLE_PAGE = """
<html>
  <head>
    <title>Azure Monitor Logs tables by category</title>
    <meta name="description" content="{filler}">
    <script>var fake = "<h2>Scripted</h2><a href='tables/scripted'>Scripted</a>";</script>
    <style>h2 {{ color: red; }}</style>
  </head>
  <body>
    <nav><h2>Outside Navigation</h2><a href="tables/outside">OutsideTable</a></nav>
    <main id="main" class="content">
      <h1>Tables by category</h1>
      <nav id="center-doc-outline"><h2 id="in-this-article">In this article</h2></nav>
      <h2 id="analytics">Analytics tables</h2>
      <p>Tables used by analytics services.</p>
      <a href="tables/analyticsoverview">AnalyticsOverview</a>
      <h3 id="azure-databricks">Azure Databricks</h3>
      <p>Microsoft.Databricks/workspaces</p>
      <ul>
        <li><a href="tables/databricksaccounts">DatabricksAccounts</a></li>
        <li><a href="tables/databricksclusters">DatabricksClusters</a></li>
        <li><a href="tables/databricksjobs">DatabricksJobs</a></li>
      </ul>
      <h2 id="security">Security logs</h2>
      <h3 id="key-vault">Key&nbsp;Vault</h3>
      <p>Microsoft.KeyVault/vaults</p>
      <ul>
        <li><a href="tables/azurediagnostics">AzureDiagnostics</a></li>
        <li><a href="../tables/azkvauditlogs"><code>AZKVAuditLogs</code></a></li>
      </ul>
      <h2 id="storage">Storage</h2>
      <h3 id="storage-accounts">Storage Accounts</h3>
      <p>microsoft.storage/storageaccounts</p>
      <p>[StorageBlobLogs](tables/storagebloblogs) and [StorageQueueLogs](tables/storagequeuelogs)</p>
      <a href="tables/storagefilelogs">StorageFileLogs</a>
      <h3 id="ab">AB</h3>
      <a href="tables/shortheading">ShortHeadingTable</a>
      <h2 id="security-more">Security</h2>
      <h3 id="key-vault-more">Key Vault</h3>
      <a href="tables/azkvpolicyevaluationdetailslogs">AZKVPolicyEvaluationDetailsLogs</a>
      <h2 id="feedback">Feedback</h2>
      <a href="tables/feedbacktable">FeedbackTable</a>
    </main>
  </body>
</html>
""".format(filler="Azure Monitor tables " * 60)

LIST_PAGE = """
<html>
  <body>
    <main>
      <h2>API Management</h2>
      <ul>
        <li>ApiManagementGatewayLogs - gateway requests</li>
        <li><a href="tables/apimws">ApiManagementWebSocketConnectionLogs</a></li>
      </ul>
      <h2>Recovery Services vaults</h2>
      <p>Microsoft.RecoveryServices/vaults</p>
      <ul>
        <li>AddonAzureBackupJobs</li>
        <li>12345</li>
      </ul>
      <h2>Unmapped service</h2>
      <ul>
        <li>SomethingLogs</li>
      </ul>
      <h2>See also</h2>
      <ul><li>IgnoredLogs</li></ul>
    </main>
  </body>
</html>
"""


@pytest.fixture
def sample_page() -> str:
    return SAMPLE_PAGE


@pytest.fixture
def list_page() -> str:
    return LIST_PAGE


@pytest.fixture
def source_url() -> str:
    return SOURCE_URL

#This file is for development purposes only

from jiwa_client_impl import get_client


def main():
    client = get_client(interactive=True)

    print("\nFetching transitions of JIWA-1...")
    for transition in client.list_issue_transitions("JIWA-1"):
        print(f"- {transition.id}: {transition.name}")

    issue = client.get_issue("JIWA-1")
    print(f"- {issue!r}")

if __name__ == "__main__":
    main()
